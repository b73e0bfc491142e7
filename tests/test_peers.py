import pytest

from monocommander.peers import (
    Peer,
    PeersRegistry,
    merge_peers,
    parse_peer_string,
    parse_peers_registry,
    peers_to_string,
    validate_peer,
    validate_peers_registry,
)

NODE_ID = "abcdef1234567890abcdef1234567890abcdef12"


@pytest.mark.parametrize(
    "peer, message",
    [
        (Peer(node_id="", address="192.168.1.1"), "peer missing node_id"),
        (Peer(node_id="invalid", address="192.168.1.1"), "invalid node_id format"),
        (Peer(node_id=NODE_ID, address=""), "peer missing address"),
    ],
)
def test_validate_peer_invalid(peer, message):
    with pytest.raises(ValueError, match=message):
        validate_peer(peer)


@pytest.mark.parametrize(
    "peer",
    [
        Peer(node_id=NODE_ID, address="192.168.1.1", port=26656),
        Peer(node_id=NODE_ID, address="seed.example.com"),
    ],
)
def test_validate_peer_valid(peer):
    assert validate_peer(peer) is None
    assert str(peer).startswith(NODE_ID + "@")


def test_parse_registry_object_format():
    data = """{
        "chain_id": "mono-sprint-1",
        "genesis_sha256": "abc123",
        "peers": [
            {"node_id": "abcdef1234567890abcdef1234567890abcdef12",
             "address": "192.168.1.1", "port": 26656}
        ]
    }"""
    reg = parse_peers_registry(data)
    assert reg.chain_id == "mono-sprint-1"
    assert reg.genesis_sha == "abc123"
    assert reg.peers == [Peer(node_id=NODE_ID, address="192.168.1.1", port=26656)]
    assert reg.seeds == []
    assert reg.persistent_peers == []


@pytest.mark.parametrize(
    "data",
    [
        '{"peers": []}',
        '{"chain_id": "mono-sprint-1", "peers": [{"node_id": "invalid", "address": "192.168.1.1"}]}',
        "{invalid}",
        '{"chain_id": "mono-sprint-1", "genesis_sha256": "abc123", "seeds": [], '
        '"persistent_peers": ["[email]:26656"]}',
        '{"chain_id": "mono-sprint-1", "genesis_sha256": "abc123", "seeds": [], '
        '"persistent_peers": ["[email]"]}',
        '{"chain_id": "mono-sprint-1", "peers": [42]}',
        "[1, 2]",
    ],
)
def test_parse_registry_errors(data):
    with pytest.raises(ValueError):
        parse_peers_registry(data)


def test_parse_registry_error_names_field_and_index():
    data = (
        '{"chain_id": "mono-sprint-1", "seeds": ['
        '"aaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaa@seed1.example.com:26656", "bad"]}'
    )
    with pytest.raises(ValueError, match=r"^seeds\[1\]: invalid peer string format"):
        parse_peers_registry(data)


@pytest.mark.parametrize(
    "data, n_peers, n_seeds, n_persistent",
    [
        (
            """{"chain_id": "mono-sprint-1", "genesis_sha256": "abc123", "seeds": [],
                "persistent_peers": ["0123456789abcdef0123456789abcdef01234567@192.0.2.10:26766"]}""",
            0,
            0,
            1,
        ),
        (
            """{"chain_id": "mono-sprint-1", "genesis_sha256": "abc123",
                "seeds": ["aaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaa@seed1.example.com:26656",
                          "bbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbb@seed2.example.com:26656"],
                "persistent_peers": []}""",
            0,
            2,
            0,
        ),
        (
            """{"chain_id": "mono-sprint-1", "genesis_sha256": "abc123",
                "seeds": ["aaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaa@seed1.example.com:26656"],
                "peers": [{"node_id": "bbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbb",
                           "address": "host.example.com", "port": 26656}],
                "persistent_peers": ["cccccccccccccccccccccccccccccccccccccccc@peer.example.com:26656"]}""",
            1,
            1,
            1,
        ),
    ],
)
def test_parse_registry_string_format(data, n_peers, n_seeds, n_persistent):
    reg = parse_peers_registry(data.encode())
    assert len(reg.peers) == n_peers
    assert len(reg.seeds) == n_seeds
    assert len(reg.persistent_peers) == n_persistent


@pytest.mark.parametrize(
    "text, node_id, address, port",
    [
        (
            "0123456789abcdef0123456789abcdef01234567@192.0.2.10:26766",
            "0123456789abcdef0123456789abcdef01234567",
            "192.0.2.10",
            26766,
        ),
        (
            "ABCDEF1234567890abcdef1234567890abcdef12@seed.example.com:26656",
            "abcdef1234567890abcdef1234567890abcdef12",
            "seed.example.com",
            26656,
        ),
    ],
)
def test_parse_peer_string(text, node_id, address, port):
    assert parse_peer_string(text) == Peer(node_id=node_id, address=address, port=port)


@pytest.mark.parametrize(
    "text",
    [
        "[email]:26656",
        "[email]",
        "aaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaa@:26656",
    ],
)
def test_parse_peer_string_invalid(text):
    with pytest.raises(ValueError, match="invalid peer string format"):
        parse_peer_string(text)


def test_validate_peers_registry():
    reg = PeersRegistry(chain_id="mono-sprint-1", genesis_sha="abc123")
    assert validate_peers_registry(reg, "mono-sprint-1", "") is None
    assert validate_peers_registry(reg, "mono-sprint-1", "abc123") is None
    with pytest.raises(ValueError, match="chain_id mismatch"):
        validate_peers_registry(reg, "mono-test-1", "")
    with pytest.raises(ValueError, match="genesis_sha256 mismatch"):
        validate_peers_registry(reg, "mono-sprint-1", "xyz789")


@pytest.mark.parametrize(
    "peer, expected",
    [
        (
            Peer(node_id=NODE_ID, address="192.168.1.1", port=26656),
            "abcdef1234567890abcdef1234567890abcdef12@192.168.1.1:26656",
        ),
        (
            Peer(node_id=NODE_ID, address="seed.example.com", port=0),
            "abcdef1234567890abcdef1234567890abcdef12@seed.example.com:26656",
        ),
    ],
)
def test_peer_str(peer, expected):
    assert str(peer) == expected


def test_peer_string_round_trip():
    peer = Peer(node_id=NODE_ID, address="node.example.com", port=30000)
    assert parse_peer_string(str(peer)) == peer


def test_peers_to_string():
    peers = [
        Peer(node_id="a" * 40, address="host1.example.com", port=26656),
        Peer(node_id="b" * 40, address="host2.example.com", port=26656),
    ]
    assert peers_to_string(peers) == (
        "a" * 40 + "@host1.example.com:26656," + "b" * 40 + "@host2.example.com:26656"
    )
    assert peers_to_string(None) == ""
    assert peers_to_string([]) == ""


def test_merge_peers_keeps_first_occurrence():
    a = [
        Peer(node_id="a" * 40, address="host1.example.com"),
        Peer(node_id="b" * 40, address="host2.example.com"),
    ]
    b = [
        Peer(node_id="b" * 40, address="host2-updated.example.com"),
        Peer(node_id="c" * 40, address="host3.example.com"),
    ]
    merged = merge_peers(a, b)
    assert [p.node_id for p in merged] == ["a" * 40, "b" * 40, "c" * 40]
    assert merged[1].address == "host2.example.com"