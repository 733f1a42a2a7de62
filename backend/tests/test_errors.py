from tests.test_utils_seed import ensure_user, jwt_headers


def test_unknown_path_returns_error_json(client):
    resp = client.get('/non-existent-path')
    # Flask default 404 should be wrapped by error handler
    assert resp.status_code == 404
    body = resp.get_json()
    assert body['error']['status'] == 404
    assert 'detail' in body['error']


def test_internal_error_shape(client, app_ctx, monkeypatch):
    admin = ensure_user('err_admin@example.com', role='ADMIN')
    import studio.routes.dashboard as dash_mod

    def boom():
        raise RuntimeError('explode')
    monkeypatch.setattr(dash_mod, 'load_current_user', boom)
    resp = client.get('/dashboard/stats', headers=jwt_headers(admin.id))
    assert resp.status_code == 500
    body = resp.get_json()
    assert body['error'] == {'status': 500, 'title': 'Internal Server Error', 'detail': 'Unexpected error'}


def test_validation_error_shape(client, app_ctx):
    admin = ensure_user('err_admin@example.com', role='ADMIN')
    resp = client.post('/services', json={'name': '   '}, headers=jwt_headers(admin.id))
    assert resp.status_code == 400
    assert resp.get_json()['error'] == {'status': 400, 'title': 'Bad Request', 'detail': 'name required'}


def test_pagination_errors(client, app_ctx):
    admin = ensure_user('err_admin@example.com', role='ADMIN')
    resp = client.get('/services?limit=abc', headers=jwt_headers(admin.id))
    assert resp.status_code == 400
    assert resp.get_json()['error']['detail'] == 'limit must be int'
