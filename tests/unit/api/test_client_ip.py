from src.api.utils.client import resolve_client_ip

PROXIES = ["10.0.0.0/8", "127.0.0.1"]


def test_direct_client_uses_socket_peer():
    assert resolve_client_ip("203.0.113.9", None, None, PROXIES) == "203.0.113.9"


def test_headers_from_untrusted_peer_are_ignored():
    ip = resolve_client_ip("203.0.113.9", "198.51.100.1", "198.51.100.2", PROXIES)

    assert ip == "203.0.113.9"


def test_no_trusted_proxies_configured():
    assert resolve_client_ip("127.0.0.1", "198.51.100.1", None, []) == "127.0.0.1"


def test_forwarded_chain_skips_trusted_hops():
    ip = resolve_client_ip("10.0.0.2", "198.51.100.7, 203.0.113.50, 10.0.0.3", None, PROXIES)

    assert ip == "203.0.113.50"


def test_spoofed_leftmost_entry_is_not_the_client():
    ip = resolve_client_ip("127.0.0.1", "1.2.3.4, 198.51.100.7", None, PROXIES)

    assert ip == "198.51.100.7"


def test_all_hops_trusted_falls_back_to_first_hop():
    assert resolve_client_ip("10.0.0.2", "10.1.1.1, 10.0.0.3", None, PROXIES) == "10.1.1.1"


def test_real_ip_header_when_no_forwarded_for():
    assert resolve_client_ip("127.0.0.1", None, " 198.51.100.4 ", PROXIES) == "198.51.100.4"


def test_garbage_hop_is_treated_as_untrusted():
    assert resolve_client_ip("127.0.0.1", "not-an-ip", None, PROXIES) == "not-an-ip"


def test_missing_peer():
    assert resolve_client_ip(None, "198.51.100.1", None, PROXIES) == "unknown"
