"""Tests for configuration selection and settings validation."""
import pytest

from app.config import (
    get_config_class,
    validate_settings,
    DevelopmentConfig,
    TestingConfig,
    ProductionConfig,
)


def test_testing_config_uses_memory_db(app):
    assert app.config['TESTING'] is True
    assert app.config['SQLALCHEMY_DATABASE_URI'].startswith('sqlite://')
    assert app.config['RATELIMIT_ENABLED'] is False


def test_config_class_follows_app_env(monkeypatch):
    monkeypatch.setenv('APP_ENV', 'testing')
    assert get_config_class() is TestingConfig
    monkeypatch.setenv('APP_ENV', 'development')
    assert get_config_class() is DevelopmentConfig
    monkeypatch.delenv('APP_ENV')
    assert get_config_class() is DevelopmentConfig


def test_production_requires_secrets(monkeypatch):
    monkeypatch.setenv('APP_ENV', 'production')
    for name in ('SECRET_KEY', 'DATABASE_URL', 'JWT_SECRET'):
        monkeypatch.delenv(name, raising=False)
    with pytest.raises(RuntimeError) as exc:
        get_config_class()
    assert 'JWT_SECRET' in str(exc.value)


def test_production_with_secrets(monkeypatch):
    monkeypatch.setenv('APP_ENV', 'production')
    monkeypatch.setenv('SECRET_KEY', 's')
    monkeypatch.setenv('DATABASE_URL', 'postgresql://localhost/shop')
    monkeypatch.setenv('JWT_SECRET', 'j')
    assert get_config_class() is ProductionConfig


def test_defaults():
    assert TestingConfig.SETTLEMENT_MODE == 'best_effort'
    assert TestingConfig.DISCOUNT_POLICY == 'allow'
    assert TestingConfig.INVOICE_NUMBER_PREFIX == 'INV'
    assert TestingConfig.INVOICE_NUMBER_WIDTH == 5


@pytest.mark.parametrize('key,value', [
    ('SETTLEMENT_MODE', 'eventually'),
    ('DISCOUNT_POLICY', 'ignore'),
])
def test_unknown_policy_rejected(key, value):
    settings = {'SETTLEMENT_MODE': 'best_effort', 'DISCOUNT_POLICY': 'allow'}
    settings[key] = value
    with pytest.raises(RuntimeError):
        validate_settings(settings)


def test_known_policies_accepted():
    validate_settings({'SETTLEMENT_MODE': 'fail_fast', 'DISCOUNT_POLICY': 'clamp'})
