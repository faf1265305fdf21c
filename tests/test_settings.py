import dataclasses

from rocketsim.settings import RecoverySettings, Settings


def test_recovery_defaults():
    rs = RecoverySettings()
    assert rs.main_deploy_altitude == 400.0
    assert rs.min_time_to_drogue == 1000
    assert rs.min_time_to_main == 3000


def test_settings_default_recovery():
    assert Settings().recovery == RecoverySettings()
    assert Settings().state_estimator is None


def test_settings_instances_do_not_share_recovery():
    a = Settings()
    b = Settings()
    a.recovery.main_deploy_altitude = 200.0
    assert b.recovery.main_deploy_altitude == 400.0


def test_override_one_field_keeps_others():
    rs = dataclasses.replace(RecoverySettings(), main_deploy_altitude=200.0)
    settings = Settings(recovery=rs)
    assert settings.recovery.main_deploy_altitude == 200.0
    assert settings.recovery.min_time_to_drogue == RecoverySettings().min_time_to_drogue
    assert settings.recovery.min_time_to_main == RecoverySettings().min_time_to_main