"""User-agent fingerprinting"""
import pytest

from devtoolkit.utils.device import DeviceInfo, detect_browser, detect_device_type, detect_os

CHROME_WINDOWS = ('Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 '
                  '(KHTML, like Gecko) Chrome/120.0 Safari/537.36')
EDGE_WINDOWS = CHROME_WINDOWS + ' Edg/120.0'
SAFARI_IPAD = ('Mozilla/5.0 (iPad; CPU OS 17_0 like Mac OS X) AppleWebKit/605.1.15 '
               '(KHTML, like Gecko) Version/17.0 Mobile/15E148 Safari/604.1')
FIREFOX_ANDROID = 'Mozilla/5.0 (Android 14; Mobile; rv:121.0) Gecko/121.0 Firefox/121.0'


@pytest.mark.parametrize('agent,device,browser,system', [
    (CHROME_WINDOWS, 'desktop', 'Chrome', 'Windows'),
    (EDGE_WINDOWS, 'desktop', 'Edge', 'Windows'),
    (SAFARI_IPAD, 'tablet', 'Safari', 'iOS'),
    (FIREFOX_ANDROID, 'mobile', 'Firefox', 'Android'),
    ('', 'desktop', 'Unknown', 'Unknown'),
])
def test_fingerprint(agent, device, browser, system):
    assert detect_device_type(agent) == device
    assert detect_browser(agent) == browser
    assert detect_os(agent) == system


def test_from_request_prefers_forwarded_for(app):
    headers = {'X-Forwarded-For': '203.0.113.9, 10.0.0.1', 'User-Agent': 'curl/8.0'}
    with app.test_request_context('/', headers=headers):
        from flask import request
        info = DeviceInfo.from_request(request)
    assert info.ip_address == '203.0.113.9'
    assert info.user_agent == 'curl/8.0'


def test_from_request_falls_back_to_remote_addr(app):
    with app.test_request_context('/', environ_base={'REMOTE_ADDR': '192.0.2.4'}):
        from flask import request
        info = DeviceInfo.from_request(request)
    assert info.ip_address == '192.0.2.4'
