from studio import get_db
from studio.models.staff_service_config import StaffServiceConfig
from tests.test_utils_seed import ensure_user, ensure_service, ensure_config, create_job_row, jwt_headers


def _admin():
    return ensure_user('svc_admin@example.com', role='ADMIN')


def test_service_crud(client, app_ctx):
    headers = jwt_headers(_admin().id)
    r = client.post('/services', json={'name': '  Wedding Edit  '}, headers=headers)
    assert r.status_code == 201
    sid = r.get_json()['id']
    assert r.get_json()['name'] == 'Wedding Edit'

    r = client.put(f'/services/{sid}', json={'name': 'Wedding Edit Deluxe'}, headers=headers)
    assert r.status_code == 200
    assert r.get_json()['name'] == 'Wedding Edit Deluxe'

    r = client.get(f'/services/{sid}', headers=headers)
    assert r.status_code == 200
    assert 'ETag' in r.headers

    r = client.delete(f'/services/{sid}', headers=headers)
    assert r.status_code == 200
    assert client.get(f'/services/{sid}', headers=headers).status_code == 404


def test_service_name_validation(client, app_ctx):
    headers = jwt_headers(_admin().id)
    ensure_service('Svc Duplicate')
    assert client.post('/services', json={'name': ''}, headers=headers).status_code == 400
    assert client.post('/services', json={'name': 'Svc Duplicate'}, headers=headers).status_code == 409


def test_any_signed_in_user_can_list_but_not_write(client, app_ctx):
    staff = ensure_user('svc_staff@example.com')
    ensure_service('Svc Listed')
    headers = jwt_headers(staff.id)
    r = client.get('/services?search=svc listed', headers=headers)
    assert r.status_code == 200
    assert [s['name'] for s in r.get_json()['data']] == ['Svc Listed']
    assert client.post('/services', json={'name': 'Svc Forbidden'}, headers=headers).status_code == 403
    mgr = ensure_user('svc_mgr@example.com', role='MANAGER')
    assert client.post('/services', json={'name': 'Svc Forbidden'}, headers=jwt_headers(mgr.id)).status_code == 403


def test_delete_service_cascades_configs_and_blocks_when_used(client, app_ctx):
    headers = jwt_headers(_admin().id)
    staff = ensure_user('svc_cascade_staff@example.com')
    unused = ensure_service('Svc Cascade Unused')
    used = ensure_service('Svc Cascade Used')
    ensure_config(staff, unused, '10')
    ensure_config(staff, used, '10')
    create_job_row(used, staff)

    assert client.delete(f'/services/{used.id}', headers=headers).status_code == 409
    unused_id = unused.id
    assert client.delete(f'/services/{unused_id}', headers=headers).status_code == 200
    session = get_db()
    assert session.query(StaffServiceConfig).filter_by(service_id=unused_id).count() == 0
    assert session.query(StaffServiceConfig).filter_by(service_id=used.id).count() == 1
