from core.models import SystemSetting


def clinic_settings(request):
    """Make clinic settings available in all templates"""
    return {
        'CLINIC_NAME': SystemSetting.get_setting('clinic_name', 'Physiotherapy Clinic'),
        'CLINIC_ADDRESS': SystemSetting.get_setting('clinic_address', ''),
        'CLINIC_PHONE': SystemSetting.get_setting('clinic_phone', ''),
        'CLINIC_EMAIL': SystemSetting.get_setting('clinic_email', ''),
        'CURRENCY_SYMBOL': SystemSetting.get_setting('currency_symbol', '$'),
    }
