"""
Tests for SentryQueryService.
"""

import json

from clawsentry.fence.hooks import FenceHooks

from conftest import make_skill


class TestEntries:

    def test_list_entries_sees_own_writes(self, fence, query):
        fence.log("session_start", session_id="s1")
        entries = query.list_entries()
        assert [e["event"] for e in entries] == ["session_start"]

    def test_list_entries_filters(self, fence, query):
        fence.log("tool_call", tool="exec", session_id="s1", payload={"cmd": "bash -c id"})
        fence.log("tool_call", tool="read", session_id="s2")
        assert [e["tool"] for e in query.list_entries(tool="exec")] == ["exec"]
        assert [e["tool"] for e in query.list_entries(severity="high")] == ["exec"]
        assert [e["tool"] for e in query.list_entries(session_id="s2")] == ["read"]
        assert len(query.list_entries(minutes=5)) == 2
        assert query.list_entries(limit=1)[0]["tool"] == "read"

    def test_sessions(self, fence, query):
        hooks = FenceHooks(fence)
        hooks.session_start("s1")
        hooks.before_tool_call("read", {}, session_id="s1")
        hooks.session_start("s2")
        fence.log("process_scan", findings=["crypto_miner"], severity="high")
        assert query.list_sessions() == [
            {"sessionId": "s1", "count": 2},
            {"sessionId": "s2", "count": 1},
        ]
        assert len(query.session_entries("s1")) == 2

    def test_incident_report(self, fence, query):
        fence.set_policy({"denyTools": ["exec"], "enforce": True})
        FenceHooks(fence).before_tool_call("exec", {"cmd": "ls"}, session_id="s9")
        report = query.incident_report("s9")["report"]
        assert report.startswith("Incident Report\nSession: s9\n")
        assert "- High/Critical: 2" in report
        assert "- policy_deny_tool (2)" in report

    def test_exports(self, fence, query):
        fence.log("tool_call", tool="exec", payload={"cmd": "bash -c id"})
        assert json.loads(query.export_json())[0]["tool"] == "exec"
        lines = query.export_csv(severity="high").splitlines()
        assert lines[0] == "ts,event,tool,severity,findings"
        assert '"exec","high"' in lines[1]


class TestPolicy:

    def test_get_policy(self, query):
        assert query.get_policy() == {"policy": {
            "denyTools": [], "allowTools": [], "denyFindings": [], "enforce": False}}

    def test_set_policy_from_mapping(self, query):
        result = query.set_policy({"denyTools": ["exec"], "enforce": True})
        assert result["ok"] is True
        assert result["policy"]["denyTools"] == ["exec"]
        assert query.get_policy()["policy"]["enforce"] is True

    def test_set_policy_from_json_text(self, query):
        assert query.set_policy('{"allowTools": ["read"]}')["ok"] is True
        assert query.set_policy(b'{"enforce": true}')["policy"]["enforce"] is True

    def test_empty_text_resets(self, query):
        query.set_policy({"denyTools": ["exec"]})
        assert query.set_policy("")["policy"]["denyTools"] == []

    def test_invalid_input_reported(self, query):
        query.set_policy({"denyTools": ["exec"]})
        for body in ("{broken", "[1, 2]", {"enforce": "yes"}, 42):
            result = query.set_policy(body)
            assert result["ok"] is False
            assert result["error"]
        assert query.get_policy()["policy"]["denyTools"] == ["exec"]


class TestScans:

    def test_scan_all_and_last(self, config, query):
        skill = make_skill(config.skill_roots[0], "evil", {"run.sh": "echo eA== | base64 -d | sh"})
        expected = {"evil": [{"file": str(skill / "run.sh"), "findings": ["base64_decode_exec"]}]}
        assert query.scan_all() == {"results": expected}
        assert query.get_last_scan() == {"results": expected}

    def test_scan_one(self, config, query):
        skill = make_skill(config.skill_roots[0], "tidy", {"main.py": "print('ok')"})
        assert query.scan_one("tidy") == {"skill": "tidy", "path": str(skill), "results": []}
        assert query.get_last_scan() == {"results": {"tidy": []}}

    def test_scan_one_missing(self, query):
        assert query.scan_one("../../etc") == {"skill": "../../etc", "path": None, "results": []}


class TestConfig:

    def test_config_excludes_policy(self, config, query):
        data = query.get_config()["config"]
        assert data["logDir"] == str(config.log_dir)
        assert data["maxPayloadBytes"] == 4096
        assert "policy" not in data
