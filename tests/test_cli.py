"""
CLI tests: state document loading, verdict commands and audit tooling.
"""

import contextlib
import io
import json
import os
import tempfile
import unittest

from rwacompliance import AttributeRegistry, AuditSigner, AuditTrail, InvalidPayload
from rwacompliance.cli import build_state, main


STATE = {
    "owner": "0xowner",
    "verifiers": ["0xverifier"],
    "profiles": {
        "0xholder": {
            "ageOver18": True,
            "ageOver21": True,
            "kycCheckPassed": True,
            "amlCheckPassed": True,
            "jurisdiction": "US",
        },
    },
    "requirements": {
        "2": {
            "require_age_over_21": True,
            "require_kyc_check_passed": True,
            "allowed_jurisdictions": ["US"],
        },
        "3": {
            "require_accredited_investor": True,
        },
    },
}


def run(argv):
    out = io.StringIO()
    err = io.StringIO()
    with contextlib.redirect_stdout(out), contextlib.redirect_stderr(err):
        code = main(["--log-level", "ERROR", "--log-format", "text"] + argv)
    return code, out.getvalue()


class CLITestCase(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)

    def write_json(self, name, data):
        path = os.path.join(self.tmp.name, name)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f)
        return path


class TestBuildState(unittest.TestCase):

    def test_builds_components(self):
        registry, catalog, evaluator = build_state(STATE)
        self.assertTrue(registry.is_verifier("0xverifier"))
        self.assertEqual(catalog.configured_assets(), [2, 3])
        self.assertTrue(evaluator.is_compliant("0xholder", 2))
        self.assertFalse(evaluator.is_compliant("0xholder", 3))

    def test_missing_owner_rejected(self):
        with self.assertRaises(InvalidPayload):
            build_state({"verifiers": []})

    def test_unknown_section_rejected(self):
        with self.assertRaises(InvalidPayload):
            build_state(dict(STATE, balances={}))


class TestVerdictCommands(CLITestCase):

    def setUp(self):
        super().setUp()
        self.state = self.write_json("state.json", STATE)

    def test_check_eligible(self):
        code, out = run(["check", "-s", self.state, "-H", "0xholder", "-a", "2"])
        self.assertEqual(code, 0)
        self.assertIn("is eligible", out)

    def test_check_ineligible(self):
        code, out = run(["check", "-s", self.state, "-H", "0xholder", "-a", "3"])
        self.assertEqual(code, 1)
        self.assertIn("NOT eligible", out)

    def test_explain(self):
        code, out = run(["explain", "-s", self.state, "-H", "0xnobody", "-a", "2"])
        self.assertEqual(code, 1)

        report = json.loads(out)
        self.assertFalse(report["eligible"])
        self.assertEqual(
            [c["check_id"] for c in report["checks"]],
            ["age_over_21", "kyc_check_passed", "jurisdiction"],
        )

    def test_invalid_state_reported(self):
        bad = self.write_json("bad.json", {"verifiers": ["0xverifier"]})
        err = io.StringIO()
        with contextlib.redirect_stdout(io.StringIO()), contextlib.redirect_stderr(err):
            code = main(["--log-level", "ERROR", "check", "-s", bad, "-H", "0xholder", "-a", "2"])
        self.assertEqual(code, 1)
        self.assertIn("Error: invalid state document", err.getvalue())

    def test_bad_profile_in_state_reported(self):
        state = dict(STATE, profiles={"0xholder": {"kyc_check_passed": "yes"}})
        path = self.write_json("bad_profile.json", state)
        err = io.StringIO()
        with contextlib.redirect_stdout(io.StringIO()), contextlib.redirect_stderr(err):
            code = main(["--log-level", "ERROR", "explain", "-s", path, "-H", "0xholder", "-a", "2"])
        self.assertEqual(code, 1)
        self.assertIn("kyc_check_passed", err.getvalue())

    def test_missing_state_file_reported(self):
        err = io.StringIO()
        missing = os.path.join(self.tmp.name, "missing.json")
        with contextlib.redirect_stdout(io.StringIO()), contextlib.redirect_stderr(err):
            code = main(["--log-level", "ERROR", "check", "-s", missing, "-H", "0xholder", "-a", "2"])
        self.assertEqual(code, 1)
        self.assertIn("Error: cannot read", err.getvalue())

    def test_no_command(self):
        code, _ = run([])
        self.assertEqual(code, 2)


class TestAuditCommands(CLITestCase):

    def export_trail(self, signer):
        trail = AuditTrail(signer=signer)
        registry = AttributeRegistry(owner="0xowner", audit_trail=trail)
        registry.set_verifier("0xowner", "0xverifier")
        registry.update_profile("0xverifier", "0xholder", {"kyc_check_passed": True})
        return trail.export()

    def test_keygen_writes_key_file(self):
        path = os.path.join(self.tmp.name, "key.json")
        code, _ = run(["keygen", "-o", path, "-k", "kid:cli"])
        self.assertEqual(code, 0)

        signer = AuditSigner.load(path)
        self.assertEqual(signer.key_id, "kid:cli")

    def test_verify_audit_valid(self):
        signer = AuditSigner.generate()
        log = self.write_json("audit.json", self.export_trail(signer))

        code, out = run(["verify-audit", "-l", log, "-p", signer.public_key_b64])
        self.assertEqual(code, 0)
        self.assertIn("VALID (2 entries)", out)

    def test_verify_audit_tampered(self):
        signer = AuditSigner.generate()
        entries = self.export_trail(signer)
        entries[1]["key"] = "0xintruder"
        log = self.write_json("audit.json", entries)

        code, out = run(["verify-audit", "-l", log])
        self.assertEqual(code, 1)
        self.assertIn("INVALID at sequence 2", out)

    def test_verify_audit_truncated_trail(self):
        trail = AuditTrail(max_events=2)
        registry = AttributeRegistry(owner="0xowner", audit_trail=trail)
        for verifier in ("0xa", "0xb", "0xc"):
            registry.set_verifier("0xowner", verifier)
        log = self.write_json("audit.json", trail.export())

        code, out = run(["verify-audit", "-l", log])
        self.assertEqual(code, 1)

        code, out = run(["verify-audit", "-l", log, "--prev-hash", trail.anchor_hash])
        self.assertEqual(code, 0)
        self.assertIn("VALID (2 entries)", out)


class TestDemo(unittest.TestCase):

    def test_demo_runs(self):
        code, out = run(["demo"])
        self.assertEqual(code, 0)
        self.assertIn("Minted 1000 units", out)
        self.assertIn("Mint denied", out)
        self.assertIn("chain valid", out)


if __name__ == "__main__":
    unittest.main()
