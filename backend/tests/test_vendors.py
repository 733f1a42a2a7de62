from studio import get_db
from studio.models.job import Job
from tests.test_utils_seed import ensure_user, ensure_service, ensure_vendor, create_job_row, jwt_headers

VENDOR = {'studio_name': 'Pixel Barn', 'contact_person': 'Meera', 'mobile': '9123456789', 'location': 'Pune'}


def test_vendor_crud(client, app_ctx):
    admin = ensure_user('vendor_admin@example.com', role='ADMIN')
    headers = jwt_headers(admin.id)
    r = client.post('/vendors', json=VENDOR, headers=headers)
    assert r.status_code == 201
    vid = r.get_json()['id']

    r = client.put(f'/vendors/{vid}', json={'notes': 'Pays on time', 'location': 'Mumbai'}, headers=headers)
    assert r.status_code == 200
    body = r.get_json()
    assert body['notes'] == 'Pays on time'
    assert body['location'] == 'Mumbai'
    assert body['studio_name'] == 'Pixel Barn'

    r = client.get(f'/vendors/{vid}', headers=headers)
    assert r.status_code == 200
    assert r.get_json()['job_count'] == 0


def test_vendor_validation(client, app_ctx):
    admin = ensure_user('vendor_admin@example.com', role='ADMIN')
    headers = jwt_headers(admin.id)
    assert client.post('/vendors', json={**VENDOR, 'mobile': '12'}, headers=headers).status_code == 400
    assert client.post('/vendors', json={**VENDOR, 'email': 'not-an-email'}, headers=headers).status_code == 400
    assert client.post('/vendors', json={**VENDOR, 'status': 'ACTIVE'}, headers=headers).status_code == 400
    assert client.put('/vendors/999999', json={'notes': 'x'}, headers=headers).status_code == 404


def test_manager_can_create_but_not_edit(client, app_ctx):
    mgr = ensure_user('vendor_mgr@example.com', role='MANAGER')
    headers = jwt_headers(mgr.id)
    r = client.post('/vendors', json={**VENDOR, 'studio_name': 'Mgr Studio'}, headers=headers)
    assert r.status_code == 201
    vid = r.get_json()['id']
    assert client.get('/vendors', headers=headers).status_code == 200
    assert client.put(f'/vendors/{vid}', json={'notes': 'x'}, headers=headers).status_code == 403
    assert client.delete(f'/vendors/{vid}', headers=headers).status_code == 403


def test_staff_cannot_read_vendors(client, app_ctx):
    staff = ensure_user('vendor_staff@example.com')
    assert client.get('/vendors', headers=jwt_headers(staff.id)).status_code == 403


def test_delete_vendor_keeps_jobs(client, app_ctx):
    admin = ensure_user('vendor_admin@example.com', role='ADMIN')
    staff = ensure_user('vendor_job_staff@example.com')
    svc = ensure_service('Vendor Delete Service')
    vendor = ensure_vendor('Vendor To Delete')
    job = create_job_row(svc, staff, vendor=vendor)
    job_id = job.id
    r = client.delete(f'/vendors/{vendor.id}', headers=jwt_headers(admin.id))
    assert r.status_code == 200
    session = get_db()
    session.expire_all()
    assert session.get(Job, job_id).vendor_id is None


def test_vendor_list_search_sort_and_validators(client, app_ctx):
    admin = ensure_user('vendor_admin@example.com', role='ADMIN')
    headers = jwt_headers(admin.id)
    ensure_vendor('Zeta Frames VL')
    ensure_vendor('Alpha Frames VL')
    r = client.get('/vendors?search=frames vl&sort=-studio_name', headers=headers)
    assert r.status_code == 200
    names = [v['studio_name'] for v in r.get_json()['data']]
    assert names == ['Zeta Frames VL', 'Alpha Frames VL']
    assert r.get_json()['pagination']['total'] == 2
    assert client.get('/vendors?sort=bogus', headers=headers).status_code == 400

    etag = r.headers['ETag']
    again = client.get('/vendors?search=frames vl&sort=-studio_name', headers={**headers, 'If-None-Match': etag})
    assert again.status_code == 304
    head = client.head('/vendors?search=frames vl', headers=headers)
    assert head.status_code == 200
    assert head.data == b''
    assert 'ETag' in head.headers


def test_vendor_detail_etag_tracks_job_count(client, app_ctx):
    admin = ensure_user('vendor_admin@example.com', role='ADMIN')
    headers = jwt_headers(admin.id)
    staff = ensure_user('vendor_etag_staff@example.com')
    svc = ensure_service('Vendor Etag Service')
    vendor = ensure_vendor('Vendor Etag Studio')
    first = client.get(f'/vendors/{vendor.id}', headers=headers)
    assert first.get_json()['job_count'] == 0
    etag = first.headers['ETag']
    create_job_row(svc, staff, vendor=vendor)
    r = client.get(f'/vendors/{vendor.id}', headers={**headers, 'If-None-Match': etag})
    assert r.status_code == 200
    assert r.get_json()['job_count'] == 1
