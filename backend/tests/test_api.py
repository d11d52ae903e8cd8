def test_health(client):
    res = client.get('/health')
    assert res.status_code == 200
    assert res.get_json() == {'status': 'ok'}


def test_index_with_no_games(client):
    res = client.get('/')
    assert res.status_code == 200
    data = res.get_json()
    assert data['activeGames'] == 0
    assert data['connectedUsers'] == 0
    assert 'message' in data


def test_stats_reflect_live_rooms(client, make_sio_client):
    alice = make_sio_client()
    bob = make_sio_client()
    carol = make_sio_client()
    alice.emit('join-game', {'gameUuid': 'g1', 'userId': 'u1', 'username': 'alice'})
    bob.emit('join-game', {'gameUuid': 'g1', 'userId': 'u2', 'username': 'bob'})
    carol.emit('join-game', {'gameUuid': 'g2', 'userId': 'u3', 'username': 'carol'})

    data = client.get('/stats').get_json()
    assert data['activeGames'] == 2
    assert data['connectedUsers'] == 3
    assert data['games'] == [
        {'uuid': 'g1', 'playersCount': 2},
        {'uuid': 'g2', 'playersCount': 1},
    ]

    carol.disconnect()
    data = client.get('/stats').get_json()
    assert data['activeGames'] == 1
    assert data['connectedUsers'] == 2
    assert data['games'] == [{'uuid': 'g1', 'playersCount': 2}]


def test_cors_allows_client_origin(client):
    res = client.get('/health', headers={'Origin': 'http://localhost:3000'})
    assert res.headers.get('Access-Control-Allow-Origin') == 'http://localhost:3000'


def test_stats_forget_user_after_rejoin_under_new_id(client, make_sio_client):
    alice = make_sio_client()
    alice.emit('join-game', {'gameUuid': 'g1', 'userId': 'u1', 'username': 'alice'})
    alice.emit('join-game', {'gameUuid': 'g2', 'userId': 'u9', 'username': 'alice'})
    assert client.get('/stats').get_json()['connectedUsers'] == 1

    alice.disconnect()
    assert client.get('/stats').get_json() == {'activeGames': 0, 'connectedUsers': 0, 'games': []}
