import json
import unittest

from trello_semantic.utils.logger import TOOL_LOGGER_NAME, generate_request_id, log_error, log_info


class TestStructuredLogging(unittest.TestCase):
    def test_info_line_is_json(self):
        with self.assertLogs(TOOL_LOGGER_NAME, level="INFO") as captured:
            log_info("tool call", tool="search_cards", request_id="req-1", args={"query": "bug"})

        payload = json.loads(captured.records[0].getMessage())
        self.assertEqual(payload["message"], "tool call")
        self.assertEqual(payload["tool"], "search_cards")
        self.assertEqual(payload["request_id"], "req-1")
        self.assertEqual(payload["extra"], {"args": {"query": "bug"}})

    def test_error_level_and_optional_fields(self):
        with self.assertLogs(TOOL_LOGGER_NAME, level="ERROR") as captured:
            log_error("tool failed")

        self.assertEqual(captured.records[0].levelname, "ERROR")
        self.assertEqual(json.loads(captured.records[0].getMessage()), {"message": "tool failed"})

    def test_request_ids_are_unique(self):
        self.assertNotEqual(generate_request_id(), generate_request_id())


if __name__ == "__main__":
    unittest.main()
