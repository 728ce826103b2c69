from scripts import ranked_probe

from ranked_vods.domain.contracts import DeathEvent, VodPage
from ranked_vods.errors import NotFoundError


class FakeService:
    def __init__(self, page=None, error=None):
        self.page = page
        self.error = error
        self.args = None

    def get_vods(self, user=None, before=None, season=None):
        self.args = (user, before, season)
        if self.error:
            raise self.error
        return self.page


def test_probe_prints_links(monkeypatch, capsys):
    service = FakeService(
        page=VodPage(events=[DeathEvent("Feinberg", "1.1.1970, 01:16:37", "https://v?t=1s")], next_cursor=3)
    )
    monkeypatch.setattr(ranked_probe, "build_default_service", lambda cache_dir=None: service)

    assert ranked_probe.main(["--user", "Feinberg", "--season", "9"]) == 0

    out = capsys.readouterr().out
    assert "https://v?t=1s" in out
    assert "next cursor: 3" in out
    assert service.args == ("Feinberg", None, "9")


def test_probe_reports_errors(monkeypatch, capsys):
    service = FakeService(error=NotFoundError("MCSRRanked", "This user does not exist."))
    monkeypatch.setattr(ranked_probe, "build_default_service", lambda cache_dir=None: service)

    assert ranked_probe.main(["--user", "ghost"]) == 1
    assert "NOT_FOUND" in capsys.readouterr().err
