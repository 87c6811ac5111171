import json
import tempfile
import unittest
from pathlib import Path

from pydantic import ValidationError

from sessionsearch.parsers.exports import ExportParseError, load_export_file, parse_export_document
from sessionsearch.tests.fixtures import andrew_export


class ExportParserTests(unittest.TestCase):
    def test_sessions_and_messages_are_enriched(self) -> None:
        parsed = parse_export_document(andrew_export(), source="andrewwang.json")

        self.assertEqual(parsed.source, "andrewwang.json")
        self.assertEqual(parsed.engineer.username, "andrewwang")
        self.assertEqual([s.id for s in parsed.sessions], ["s1", "s2", "s3"])
        self.assertEqual([m.id for m in parsed.messages], ["a1", "a2", "a3", "a4", "a5", "a6", "a7"])

        s1 = parsed.sessions[0]
        self.assertEqual(s1.engineer.username, "andrewwang")
        self.assertEqual(s1.project.name, "alpha-api")
        self.assertEqual(s1.schemaVersion, 2)

        a1 = parsed.messages[0]
        self.assertEqual(a1.session.id, "s1")
        self.assertEqual(a1.session.metadata.taskDescription, "Refactor auth middleware")
        self.assertEqual(a1.project.workingDirectory, "/work/alpha")
        self.assertEqual(a1.engineer.email, "andrew@example.com")
        self.assertEqual(a1.rawMetadata, {"source": "fixture"})

    def test_unresolved_references_leave_enrichment_empty(self) -> None:
        parsed = parse_export_document(andrew_export())
        by_id = {m.id: m for m in parsed.messages}

        s3 = parsed.sessions[2]
        self.assertIsNone(s3.project)
        self.assertEqual(by_id["a5"].session.id, "s3")
        self.assertIsNone(by_id["a5"].project)

        orphan = by_id["a6"]
        self.assertIsNone(orphan.session)
        self.assertIsNone(orphan.project)
        self.assertEqual(orphan.engineer.username, "andrewwang")

    def test_entities_are_frozen(self) -> None:
        parsed = parse_export_document(andrew_export())
        with self.assertRaises(ValidationError):
            parsed.messages[0].content = "changed"

    def test_missing_collections_default_to_empty(self) -> None:
        parsed = parse_export_document({"engineer": {"username": "solo"}})
        self.assertEqual(parsed.sessions, [])
        self.assertEqual(parsed.messages, [])

    def test_rejects_wrong_shapes(self) -> None:
        with self.assertRaises(ExportParseError):
            parse_export_document([])
        with self.assertRaises(ExportParseError):
            parse_export_document({"engineer": {}, "messages": "nope"})
        with self.assertRaises(ExportParseError):
            parse_export_document({"engineer": {}, "sessions": ["s1"]})

    def test_invalid_record_raises(self) -> None:
        document = andrew_export()
        document["messages"][1]["sequenceNumber"] = "not-a-number"
        with self.assertRaises(ValidationError):
            parse_export_document(document)

    def test_null_optional_fields_fall_back_to_defaults(self) -> None:
        document = andrew_export()
        document["engineer"]["role"] = None
        document["projects"][0]["workingDirectory"] = None
        document["projects"][1]["metadata"] = None
        document["sessions"][0]["metadata"] = None
        document["messages"][0]["type"] = None
        document["messages"][0]["rawMetadata"] = None
        document["messages"][0]["typeSpecificData"] = None

        parsed = parse_export_document(document, source="andrewwang.json")

        self.assertEqual(len(parsed.messages), 7)
        self.assertEqual(parsed.engineer.role, "")
        self.assertEqual(parsed.projects[0].workingDirectory, "")
        self.assertIsNone(parsed.projects[1].metadata.primaryLanguage)
        a1 = parsed.messages[0]
        self.assertEqual(a1.type, "")
        self.assertEqual(a1.rawMetadata, {})
        self.assertEqual(a1.typeSpecificData, {})
        self.assertIsNone(a1.session.metadata.taskDescription)
        self.assertEqual(a1.project.workingDirectory, "")

    def test_load_export_file(self) -> None:
        tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(tmpdir.cleanup)
        path = Path(tmpdir.name) / "andrewwang.json"
        path.write_text(json.dumps(andrew_export()), encoding="utf-8")

        parsed = load_export_file(path)
        self.assertEqual(parsed.source, "andrewwang.json")
        self.assertEqual(len(parsed.messages), 7)


if __name__ == "__main__":
    unittest.main()
