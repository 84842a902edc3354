"""
Audit trail tests: hash chaining, Ed25519 signatures, tamper detection
and key persistence.
"""

import copy
import os
import tempfile
import unittest
from datetime import datetime, timezone

from rwacompliance import (
    AttributeRegistry,
    AuditEventType,
    AuditSigner,
    AuditTrail,
    RequirementCatalog,
    verify_chain,
    verify_signature,
)


OWNER = "0xowner"


def fixed_clock():
    return datetime(2026, 1, 1, tzinfo=timezone.utc)


class TestAuditTrail(unittest.TestCase):

    def setUp(self):
        self.trail = AuditTrail(clock=fixed_clock)
        self.registry = AttributeRegistry(owner=OWNER, audit_trail=self.trail)
        self.catalog = RequirementCatalog(owner=OWNER, audit_trail=self.trail)

    def populate(self):
        self.registry.set_verifier(OWNER, "0xverifier")
        self.registry.update_profile("0xverifier", "0xholder", {"kyc_check_passed": True})
        self.catalog.set_requirements(OWNER, 1, {"require_kyc_check_passed": True})
        self.catalog.add_allowed_jurisdiction(OWNER, 1, "US")

    def test_sequences_and_links(self):
        self.populate()
        events = self.trail.events()

        self.assertEqual([e.sequence for e in events], [1, 2, 3, 4])
        self.assertIsNone(events[0].prev_hash)
        for prev, event in zip(events, events[1:]):
            self.assertEqual(event.prev_hash, prev.entry_hash)
        self.assertEqual(self.trail.head_hash, events[-1].entry_hash)
        self.assertTrue(events[0].entry_hash.startswith("sha256:"))

    def test_timestamp_from_clock(self):
        event = self.trail.emit(AuditEventType.ASSET_CREATED, 1)
        self.assertEqual(event.emitted_at, "2026-01-01T00:00:00Z")

    def test_filters(self):
        self.populate()
        self.assertEqual(len(self.trail.events(AuditEventType.PROFILE_UPDATED)), 1)
        self.assertEqual(len(self.trail.events(key=1)), 2)
        self.assertEqual(self.trail.events(key="1")[-1].detail, "US")

    def test_intact_chain_verifies(self):
        self.populate()
        result = self.trail.verify()
        self.assertTrue(result)
        self.assertEqual(result.checked, 4)

    def test_empty_chain_verifies(self):
        self.assertTrue(verify_chain([]))

    def test_tampered_key_detected(self):
        self.populate()
        exported = self.trail.export()
        exported[1]["key"] = "0xsomeone-else"

        result = verify_chain(exported)
        self.assertFalse(result.valid)
        self.assertEqual(result.failed_sequence, 2)
        self.assertEqual(result.reason, "entry hash mismatch")

    def test_removed_entry_detected(self):
        self.populate()
        exported = self.trail.export()
        del exported[1]

        result = verify_chain(exported)
        self.assertFalse(result.valid)
        self.assertEqual(result.failed_sequence, 3)
        self.assertEqual(result.reason, "sequence gap")

    def test_removed_head_detected(self):
        self.populate()
        exported = self.trail.export()

        result = verify_chain(exported[2:])
        self.assertFalse(result.valid)
        self.assertEqual(result.failed_sequence, 3)

    def test_removed_head_with_relinked_sequence_detected(self):
        self.populate()
        tail = self.trail.export()[2:]
        tail[0]["sequence"] = 1

        result = verify_chain(tail)
        self.assertFalse(result.valid)
        self.assertEqual(result.reason, "broken link")

    def test_explicit_starting_point(self):
        self.populate()
        exported = self.trail.export()

        result = verify_chain(exported[2:], expected_prev_hash=exported[1]["entry_hash"])
        self.assertTrue(result)
        self.assertEqual(result.checked, 2)

        wrong = verify_chain(exported[2:], expected_prev_hash=exported[0]["entry_hash"])
        self.assertEqual(wrong.reason, "broken link")

    def test_non_integer_sequence_rejected(self):
        self.populate()
        exported = self.trail.export()
        exported[0]["sequence"] = "1"
        self.assertEqual(verify_chain(exported).reason, "bad sequence")

    def test_max_events_retains_tail(self):
        trail = AuditTrail(max_events=2)
        for asset_id in range(1, 6):
            trail.emit(AuditEventType.ASSET_CREATED, asset_id)

        self.assertEqual(len(trail), 2)
        self.assertEqual([e.key for e in trail.events()], ["4", "5"])
        self.assertTrue(trail.verify())

        exported = trail.export()
        self.assertFalse(verify_chain(exported))
        self.assertEqual(trail.anchor_hash, trail.events()[0].prev_hash)
        self.assertTrue(verify_chain(exported, expected_prev_hash=trail.anchor_hash))


class TestSignedTrail(unittest.TestCase):

    def setUp(self):
        self.signer = AuditSigner.generate("kid:test")
        self.trail = AuditTrail(signer=self.signer)
        registry = AttributeRegistry(owner=OWNER, audit_trail=self.trail)
        registry.set_verifier(OWNER, "0xverifier")
        registry.remove_verifier(OWNER, "0xverifier")

    def test_entries_signed(self):
        for event in self.trail.events():
            self.assertEqual(event.signature["key_id"], "kid:test")
            self.assertEqual(event.signature["algorithm"], "Ed25519")

    def test_verifies_with_own_key(self):
        self.assertTrue(self.trail.verify())
        self.assertTrue(verify_chain(self.trail.export(), self.signer.public_key_b64))

    def test_wrong_key_rejected(self):
        other = AuditSigner.generate()
        result = self.trail.verify(other.public_key_b64)
        self.assertFalse(result.valid)
        self.assertEqual(result.reason, "bad signature")

    def test_stripped_signature_rejected(self):
        exported = copy.deepcopy(self.trail.export())
        del exported[0]["signature"]
        result = verify_chain(exported, self.signer.public_key_b64)
        self.assertEqual(result.reason, "bad signature")
        self.assertEqual(result.failed_sequence, 1)


class TestAuditSigner(unittest.TestCase):

    def test_sign_and_verify(self):
        signer = AuditSigner.generate()
        signature = signer.sign(b"entry")
        self.assertTrue(verify_signature(b"entry", signature["sig"], signer.public_key_b64))
        self.assertFalse(verify_signature(b"other", signature["sig"], signer.public_key_b64))

    def test_malformed_input_is_false(self):
        signer = AuditSigner.generate()
        self.assertFalse(verify_signature(b"entry", "not base64!", signer.public_key_b64))
        self.assertFalse(verify_signature(b"entry", "", "AAAA"))

    def test_save_and_load(self):
        signer = AuditSigner.generate("kid:persisted")
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "key.json")
            signer.save(path)
            loaded = AuditSigner.load(path)

        self.assertEqual(loaded.key_id, "kid:persisted")
        self.assertEqual(loaded.public_key_b64, signer.public_key_b64)
        signature = loaded.sign(b"entry")
        self.assertTrue(verify_signature(b"entry", signature["sig"], signer.public_key_b64))


if __name__ == "__main__":
    unittest.main()
