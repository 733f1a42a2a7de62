from decimal import Decimal
from sqlalchemy import select
from studio import get_db
from studio.models.job import Job
from studio.models.audit import AuditLog
from tests.test_utils_seed import (
    ensure_user, ensure_service, ensure_config, ensure_vendor, create_job_row, jwt_headers, login_headers,
)


def _admin():
    return ensure_user('jobs_admin@example.com', role='ADMIN', name='Jobs Admin')


def test_end_to_end_commission_and_completion(client, app_ctx):
    admin_headers = jwt_headers(_admin().id)
    svc = client.post('/services', json={'name': 'Jobs E2E Album Design'}, headers=admin_headers).get_json()
    created = client.post('/api/admin/create-user', json={
        'email': 'jobs_e2e_staff@example.com', 'password': 'secret99', 'name': 'E2E Staff', 'role': 'USER',
        'commissions': [{'service_id': svc['id'], 'percentage': 10, 'due_date_offset': 2}],
    }, headers=admin_headers)
    assert created.status_code == 201
    staff_id = created.get_json()['id']

    r = client.post('/jobs', json={'service_id': svc['id'], 'staff_id': staff_id, 'amount': 50000, 'description': 'Album for client'}, headers=admin_headers)
    assert r.status_code == 201, r.get_json()
    job = r.get_json()
    assert job['commission_amount'] == '5000.00'
    assert job['amount_display'] == '₹50,000'
    assert job['commission_display'] == '₹5,000'
    assert job['working_time'] == 'Not started'
    assert job['commission_percentage'] == '10.00'
    assert job['status'] == 'PENDING'
    assert job['job_due_date'] is not None
    stored = get_db().get(Job, job['id'])
    assert Decimal(stored.commission_amount) == Decimal('5000')

    staff_headers = login_headers(client, 'jobs_e2e_staff@example.com', 'secret99')
    r = client.post(f"/jobs/{job['id']}/status", json={'status': 'IN_PROGRESS'}, headers=staff_headers)
    assert r.status_code == 200
    started_at = r.get_json()['started_at']
    assert started_at is not None
    r = client.post(f"/jobs/{job['id']}/status", json={'status': 'COMPLETED'}, headers=staff_headers)
    assert r.status_code == 200
    body = r.get_json()
    assert body['status'] == 'COMPLETED'
    assert body['completed_at'] is not None
    assert body['started_at'] == started_at
    assert body['is_overdue'] is False
    audits = get_db().execute(select(AuditLog).where(AuditLog.action=='JOB.STATUS', AuditLog.entity_id==str(job['id']))).scalars().all()
    assert len(audits) == 2
    assert audits[0].role_snapshot == 'USER'


def test_create_job_requires_eligible_staff(client, app_ctx):
    headers = jwt_headers(_admin().id)
    svc = ensure_service('Jobs Ineligible Service')
    staff = ensure_user('jobs_ineligible@example.com')
    r = client.post('/jobs', json={'service_id': svc.id, 'staff_id': staff.id, 'amount': 100, 'job_due_date': '2030-01-01T00:00:00Z'}, headers=headers)
    assert r.status_code == 400
    assert 'no commission rate' in r.get_json()['error']['detail']


def test_create_job_validation(client, app_ctx):
    headers = jwt_headers(_admin().id)
    svc = ensure_service('Jobs Validation Service')
    staff = ensure_user('jobs_validation@example.com')
    ensure_config(staff, svc, '10')
    base = {'service_id': svc.id, 'staff_id': staff.id, 'amount': 100}
    # no offset configured and no explicit due date
    assert client.post('/jobs', json=base, headers=headers).status_code == 400
    due = {**base, 'job_due_date': '2030-01-01T00:00:00Z'}
    assert client.post('/jobs', json={**due, 'amount': -5}, headers=headers).status_code == 400
    assert client.post('/jobs', json={**due, 'commission_percentage': 101}, headers=headers).status_code == 400
    assert client.post('/jobs', json={**due, 'vendor_id': 999999}, headers=headers).status_code == 400
    assert client.post('/jobs', json={**due, 'service_id': None}, headers=headers).status_code == 400
    assert client.post('/jobs', json={**due, 'job_due_date': 'tomorrow'}, headers=headers).status_code == 400
    ok = client.post('/jobs', json={**due, 'commission_percentage': '12.5'}, headers=headers)
    assert ok.status_code == 201
    assert ok.get_json()['commission_amount'] == '12.50'
    assert ok.get_json()['job_due_date'] == '2030-01-01T00:00:00Z'


def test_plain_staff_cannot_create_jobs(client, app_ctx):
    staff = ensure_user('jobs_creator_denied@example.com')
    svc = ensure_service('Jobs Denied Service')
    ensure_config(staff, svc, '10', due_date_offset=1)
    r = client.post('/jobs', json={'service_id': svc.id, 'staff_id': staff.id, 'amount': 10}, headers=jwt_headers(staff.id))
    assert r.status_code == 403


def test_staff_sees_and_moves_only_own_jobs(client, app_ctx):
    svc = ensure_service('Jobs Scope Service')
    mine = ensure_user('jobs_scope_mine@example.com')
    theirs = ensure_user('jobs_scope_theirs@example.com')
    own_job = create_job_row(svc, mine, description='scope own')
    other_job = create_job_row(svc, theirs, description='scope other')
    headers = jwt_headers(mine.id)

    listed = client.get('/jobs?search=scope', headers=headers).get_json()['data']
    assert [j['id'] for j in listed] == [own_job.id]
    assert client.get(f'/jobs/{own_job.id}', headers=headers).status_code == 200
    assert client.get(f'/jobs/{other_job.id}', headers=headers).status_code == 403
    r = client.post(f'/jobs/{other_job.id}/status', json={'status': 'IN_PROGRESS'}, headers=headers)
    assert r.status_code == 403
    session = get_db()
    session.expire_all()
    assert session.get(Job, other_job.id).status == 'PENDING'

    mgr = ensure_user('jobs_scope_mgr@example.com', role='MANAGER')
    mgr_listed = client.get('/jobs?search=scope', headers=jwt_headers(mgr.id)).get_json()['data']
    assert {j['id'] for j in mgr_listed} == {own_job.id, other_job.id}
    assert client.post(f'/jobs/{other_job.id}/status', json={'status': 'COMPLETED'}, headers=jwt_headers(mgr.id)).status_code == 200


def test_invalid_status_rejected(client, app_ctx):
    svc = ensure_service('Jobs Bad Status Service')
    staff = ensure_user('jobs_bad_status@example.com')
    job = create_job_row(svc, staff)
    headers = jwt_headers(staff.id)
    assert client.post(f'/jobs/{job.id}/status', json={'status': 'PAUSED'}, headers=headers).status_code == 400
    assert client.post(f'/jobs/{job.id}/status', json={}, headers=headers).status_code == 400
    assert client.post('/jobs/999999/status', json={'status': 'COMPLETED'}, headers=headers).status_code == 404


def test_list_filters_and_sort(client, app_ctx):
    headers = jwt_headers(_admin().id)
    svc = ensure_service('Jobs Filter Service')
    other_svc = ensure_service('Jobs Filter Other')
    staff = ensure_user('jobs_filter_staff@example.com')
    vendor = ensure_vendor('Jobs Filter Vendor')
    small = create_job_row(svc, staff, amount='100', vendor=vendor, description='filterable')
    big = create_job_row(svc, staff, amount='900', status='COMPLETED', description='filterable')
    create_job_row(other_svc, staff, amount='500', description='filterable')

    r = client.get(f'/jobs?service_id={svc.id}&sort=-amount', headers=headers)
    assert [j['id'] for j in r.get_json()['data']] == [big.id, small.id]
    r = client.get(f'/jobs?vendor_id={vendor.id}', headers=headers)
    assert [j['id'] for j in r.get_json()['data']] == [small.id]
    assert r.get_json()['data'][0]['vendor_name'] == 'Jobs Filter Vendor'
    r = client.get(f'/jobs?staff_id={staff.id}&status=COMPLETED', headers=headers)
    assert [j['id'] for j in r.get_json()['data']] == [big.id]
    r = client.get(f'/jobs?staff_id={staff.id}&limit=2&page=2', headers=headers)
    assert r.get_json()['pagination'] == {'total': 3, 'limit': 2, 'offset': 2, 'returned': 1}
    assert client.get('/jobs?status=PAUSED', headers=headers).status_code == 400
    assert client.get('/jobs?service_id=abc', headers=headers).status_code == 400


def test_edit_job_recomputes_commission(client, app_ctx):
    headers = jwt_headers(_admin().id)
    svc = ensure_service('Jobs Edit Service')
    staff = ensure_user('jobs_edit_staff@example.com')
    ensure_config(staff, svc, '10')
    job = create_job_row(svc, staff, amount='1000', percentage='10')
    r = client.put(f'/jobs/{job.id}', json={'amount': 3000, 'description': 'bigger'}, headers=headers)
    assert r.status_code == 200
    body = r.get_json()
    assert body['commission_amount'] == '300.00'
    assert body['description'] == 'bigger'
    assert body['warnings'] == []


def test_edit_job_service_change_keeps_staff_with_warning(client, app_ctx):
    headers = jwt_headers(_admin().id)
    svc = ensure_service('Jobs Switch From')
    target = ensure_service('Jobs Switch To')
    staff = ensure_user('jobs_switch_staff@example.com', name='Switch Staff')
    ensure_config(staff, svc, '10')
    job = create_job_row(svc, staff, amount='1000', percentage='10')
    r = client.put(f'/jobs/{job.id}', json={'service_id': target.id}, headers=headers)
    assert r.status_code == 200
    body = r.get_json()
    assert body['service_id'] == target.id
    assert body['service_name'] == 'Jobs Switch To'
    assert body['staff_id'] == staff.id
    assert body['commission_percentage'] == '10.00'
    assert len(body['warnings']) == 1


def test_edit_job_takes_new_assignment_rate(client, app_ctx):
    headers = jwt_headers(_admin().id)
    svc = ensure_service('Jobs Reassign Service')
    first = ensure_user('jobs_reassign_a@example.com')
    second = ensure_user('jobs_reassign_b@example.com', name='Reassigned')
    ensure_config(first, svc, '10')
    ensure_config(second, svc, '20')
    job = create_job_row(svc, first, amount='1000', percentage='10')
    r = client.put(f'/jobs/{job.id}', json={'staff_id': second.id, 'status': 'IN_PROGRESS'}, headers=headers)
    body = r.get_json()
    assert body['staff_name'] == 'Reassigned'
    assert body['commission_amount'] == '200.00'
    assert body['status'] == 'IN_PROGRESS'
    assert body['started_at'] is not None


def test_edit_and_delete_are_admin_only(client, app_ctx):
    svc = ensure_service('Jobs Admin Only')
    staff = ensure_user('jobs_admin_only_staff@example.com')
    mgr = ensure_user('jobs_admin_only_mgr@example.com', role='MANAGER')
    job = create_job_row(svc, staff)
    assert client.put(f'/jobs/{job.id}', json={'amount': 1}, headers=jwt_headers(mgr.id)).status_code == 403
    assert client.delete(f'/jobs/{job.id}', headers=jwt_headers(mgr.id)).status_code == 403
    job_id = job.id
    assert client.delete(f'/jobs/{job_id}', headers=jwt_headers(_admin().id)).status_code == 200
    assert client.get(f'/jobs/{job_id}', headers=jwt_headers(_admin().id)).status_code == 404


def _assert_commission_matches_stored_rate(job_id):
    session = get_db()
    stored = session.get(Job, job_id)
    session.refresh(stored)
    amount, rate = Decimal(stored.amount), Decimal(stored.commission_percentage)
    assert Decimal(stored.commission_amount) == amount * rate / 100


def test_fractional_inputs_are_stored_in_cents(client, app_ctx):
    headers = jwt_headers(_admin().id)
    svc = ensure_service('Jobs Cents Service')
    staff = ensure_user('jobs_cents_staff@example.com')
    ensure_config(staff, svc, '10')
    r = client.post('/jobs', json={
        'service_id': svc.id, 'staff_id': staff.id, 'amount': '999.999',
        'commission_percentage': '12.345', 'job_due_date': '2030-01-01T00:00:00Z',
    }, headers=headers)
    assert r.status_code == 201, r.get_json()
    body = r.get_json()
    assert body['amount'] == '1000.00'
    assert body['commission_percentage'] == '12.35'
    assert body['commission_amount'] == '123.50'
    _assert_commission_matches_stored_rate(body['id'])


def test_commission_survives_storage_and_unrelated_edits(client, app_ctx):
    headers = jwt_headers(_admin().id)
    svc = ensure_service('Jobs Snapshot Service')
    staff = ensure_user('jobs_snapshot_staff@example.com')
    cfg = ensure_config(staff, svc, '12.5')
    r = client.post('/jobs', json={
        'service_id': svc.id, 'staff_id': staff.id, 'amount': 1234.56, 'job_due_date': '2030-01-01T00:00:00Z',
    }, headers=headers)
    assert r.status_code == 201
    job_id = r.get_json()['id']
    before = r.get_json()['commission_amount']
    _assert_commission_matches_stored_rate(job_id)

    # a later rate change does not touch the existing job
    cfg.percentage = Decimal('40')
    get_db().commit()
    r = client.put(f'/jobs/{job_id}', json={'description': 'typo fix'}, headers=headers)
    assert r.status_code == 200
    assert r.get_json()['commission_amount'] == before
    assert r.get_json()['commission_percentage'] == '12.50'
    _assert_commission_matches_stored_rate(job_id)

    r = client.put(f'/jobs/{job_id}', json={'amount': '2000.004'}, headers=headers)
    assert r.get_json()['amount'] == '2000.00'
    assert r.get_json()['commission_amount'] == '250.00'
    _assert_commission_matches_stored_rate(job_id)
