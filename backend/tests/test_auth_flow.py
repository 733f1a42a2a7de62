from tests.test_utils_seed import ensure_user, jwt_headers, login_headers


def test_login_me_and_navigation(client, app_ctx):
    ensure_user('auth_mgr@example.com', role='MANAGER', name='Auth Manager')
    r = client.post('/auth/login', json={'email': 'Auth_Mgr@example.com ', 'password': 'secret123'})
    assert r.status_code == 200
    body = r.get_json()
    assert body['role'] == 'MANAGER'
    headers = {'Authorization': f"Bearer {body['access_token']}"}

    me = client.get('/auth/me', headers=headers).get_json()
    assert me['name'] == 'Auth Manager'
    assert [n['label'] for n in me['nav']] == ['Dashboard', 'Vendors', 'Jobs']

    nav = client.get('/auth/navigation', headers=headers).get_json()
    assert nav['role'] == 'MANAGER'
    assert nav['nav'] == me['nav']


def test_login_failures(client, app_ctx):
    ensure_user('auth_fail@example.com')
    assert client.post('/auth/login', json={'email': 'auth_fail@example.com'}).status_code == 400
    bad = client.post('/auth/login', json={'email': 'auth_fail@example.com', 'password': 'wrong-one'})
    assert bad.status_code == 401
    assert bad.get_json()['error']['detail'] == 'invalid credentials'
    assert client.post('/auth/login', json={'email': 'ghost@example.com', 'password': 'secret123'}).status_code == 401


def test_missing_and_bad_tokens_use_error_shape(client):
    r = client.get('/auth/me')
    assert r.status_code == 401
    assert r.get_json()['error']['status'] == 401
    r = client.get('/jobs', headers={'Authorization': 'Bearer not-a-token'})
    assert r.status_code in (401, 422)
    assert 'error' in r.get_json()


def test_role_is_read_from_profile_not_token(client, app_ctx):
    from studio import get_db
    u = ensure_user('auth_demoted@example.com', role='ADMIN')
    headers = login_headers(client, 'auth_demoted@example.com')
    assert client.get('/staff', headers=headers).status_code == 200
    session = get_db()
    u = session.get(type(u), u.id)
    u.role = 'USER'
    session.commit()
    # the token still carries role=ADMIN, the stored profile wins
    assert client.get('/staff', headers=headers).status_code == 403


def test_token_for_deleted_profile_is_rejected(client, app_ctx):
    r = client.get('/jobs', headers=jwt_headers(987654))
    assert r.status_code == 401
    assert r.get_json()['error']['detail'] == 'Invalid session'


def test_can_access_endpoint(client, app_ctx):
    staff = ensure_user('auth_gate_staff@example.com')
    headers = jwt_headers(staff.id)
    r = client.get('/auth/can-access?route=/dashboard/admin/staff', headers=headers)
    assert r.get_json() == {'route': '/dashboard/admin/staff', 'role': 'USER', 'allowed': False}
    r = client.get('/auth/can-access?route=/dashboard/staff/my-jobs', headers=headers)
    assert r.get_json()['allowed'] is True
    assert client.get('/auth/can-access', headers=headers).status_code == 400
