from climaquote.core.config import Settings, settings


def test_cors_allow_all_replaces_origins(monkeypatch):
    monkeypatch.setenv('CORS_ALLOW_ALL', 'true')
    assert Settings().CORS_ORIGINS == ['*']


def test_configured_origin_passes_preflight(client):
    origin = settings.CORS_ORIGINS[0]
    response = client.options('/healthz', headers={
        'Origin': origin,
        'Access-Control-Request-Method': 'GET'
    })
    assert response.status_code == 200
    assert response.headers.get('access-control-allow-origin') == origin
