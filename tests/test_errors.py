from ranked_vods.errors import APIError, NetworkError, UpstreamError


def test_apierror_to_dict():
    err = APIError("MCSRRanked", "Ranked API failed", "details", code="TIMEOUT")
    data = err.to_dict()
    assert data["source"] == "MCSRRanked"
    assert data["code"] == "TIMEOUT"
    assert "details" in data


def test_network_error_is_upstream_error():
    err = NetworkError("MCSRRanked", "reset", endpoint="matches/1", status_code=502)
    assert isinstance(err, UpstreamError)
    assert err.to_dict()["code"] == "NETWORK_ERROR"
    assert "details" not in err.to_dict()
