from conftest import auth_headers


def test_healthz_reports_firestore(client):
    response = client.get('/healthz')

    assert response.status_code == 200
    assert response.get_json() == {'status': 'ok', 'firestore_ready': True}


def test_unknown_route_uses_error_envelope(client):
    response = client.get('/api/nope')

    assert response.status_code == 404
    body = response.get_json()
    assert body['status'] is False
    assert body['error'] == 'not_found'


def test_request_id_is_echoed(client):
    response = client.get('/healthz', headers={'X-Request-ID': 'req-42'})

    assert response.headers['X-Request-ID'] == 'req-42'


def test_request_id_is_generated_when_missing(client):
    response = client.get('/healthz')

    assert len(response.headers['X-Request-ID']) == 32


def test_invalid_token_is_unauthorized(client):
    response = client.get('/api/questions/question-1', headers={'Authorization': 'Bearer garbage'})

    assert response.status_code == 401
    assert response.get_json()['status'] is False


def test_unexpected_error_becomes_internal_error(client, db):
    def _broken_collection(name):
        raise RuntimeError('boom')

    db.collection = _broken_collection

    response = client.get('/api/questions/question-1', headers=auth_headers('inst-1'))

    assert response.status_code == 500
    assert response.get_json() == {'status': False, 'message': 'Internal server error', 'error': 'internal_error'}


def test_non_object_json_body_is_bad_request(client):
    response = client.post('/api/questions/question-1/confirm-delete', json=['123456'], headers=auth_headers('inst-1'))

    assert response.status_code == 400
