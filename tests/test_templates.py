"""Tests for logview/templates.py"""

import unittest

from logview.templates import (
    DefaultParser,
    FastApiParser,
    LaravelParser,
    Template,
    get_parser,
    resolve_template,
)


class TestResolveTemplate(unittest.TestCase):
    def test_enum_passthrough(self):
        self.assertIs(resolve_template(Template.LARAVEL), Template.LARAVEL)

    def test_name_case_insensitive(self):
        self.assertIs(resolve_template("FastAPI"), Template.FASTAPI)

    def test_none_and_empty_are_default(self):
        self.assertIs(resolve_template(None), Template.DEFAULT)
        self.assertIs(resolve_template(""), Template.DEFAULT)

    def test_unknown_name_falls_back_with_warning(self):
        with self.assertLogs("logview.templates", level="WARNING"):
            self.assertIs(resolve_template("django"), Template.DEFAULT)


class TestGetParser(unittest.TestCase):
    def test_each_template_has_a_parser(self):
        self.assertIsInstance(get_parser(Template.DEFAULT), DefaultParser)
        self.assertIsInstance(get_parser(Template.LARAVEL), LaravelParser)
        self.assertIsInstance(get_parser(Template.FASTAPI), FastApiParser)

    def test_non_template_raises(self):
        with self.assertRaises(ValueError):
            get_parser("default")


class TestDefaultParser(unittest.TestCase):
    def setUp(self):
        self.parser = DefaultParser()

    def test_comma_millis_with_level_marker(self):
        p = self.parser.parse("2024-12-10 08:00:01,234 ERROR something broke")
        self.assertEqual(p.timestamp, "2024-12-10 08:00:01,234")
        self.assertEqual(p.level, "error")
        self.assertEqual(p.message, "something broke")

    def test_iso_with_zulu(self):
        p = self.parser.parse("2024-12-10T08:00:01.123Z Server started")
        self.assertEqual(p.timestamp, "2024-12-10T08:00:01.123Z")
        self.assertEqual(p.level, "info")
        self.assertEqual(p.message, "Server started")

    def test_iso_with_offset_and_bracketed_level(self):
        p = self.parser.parse("2024-12-10T08:00:01+02:00 [warn] disk almost full")
        self.assertEqual(p.timestamp, "2024-12-10T08:00:01+02:00")
        self.assertEqual(p.level, "warning")
        self.assertEqual(p.message, "disk almost full")

    def test_space_separated_with_dot_fraction(self):
        p = self.parser.parse("2024-12-10 08:00:01.500 DEBUG cache hit")
        self.assertEqual(p.timestamp, "2024-12-10 08:00:01.500")
        self.assertEqual(p.level, "debug")
        self.assertEqual(p.message, "cache hit")

    def test_syslog_timestamp(self):
        p = self.parser.parse("Dec 10 08:00:01 host sshd[123]: Accepted publickey")
        self.assertEqual(p.timestamp, "Dec 10 08:00:01")
        self.assertEqual(p.message, "host sshd[123]: Accepted publickey")
        self.assertEqual(p.level, "info")

    def test_lowercase_word_after_timestamp_is_kept(self):
        p = self.parser.parse("2024-12-10 08:00:01 error while connecting")
        self.assertEqual(p.message, "error while connecting")
        self.assertEqual(p.level, "error")

    def test_no_structure_keeps_whole_line(self):
        line = "worker ready, waiting for jobs"
        p = self.parser.parse(line)
        self.assertIsNone(p.timestamp)
        self.assertEqual(p.level, "info")
        self.assertEqual(p.message, line)

    def test_level_priority_error_beats_warning(self):
        self.assertEqual(self.parser.parse("warning: error rate climbing").level, "error")

    def test_level_keywords(self):
        self.assertEqual(self.parser.parse("Unhandled Exception in job").level, "error")
        self.assertEqual(self.parser.parse("FATAL: out of memory").level, "error")
        self.assertEqual(self.parser.parse("Critical section entered").level, "error")
        self.assertEqual(self.parser.parse("WARN low disk").level, "warning")
        self.assertEqual(self.parser.parse("TRACE enter handler").level, "debug")
        self.assertEqual(self.parser.parse("debug: payload size 12").level, "debug")

    def test_level_from_whole_line_not_message(self):
        p = self.parser.parse("2024-12-10 08:00:01 [ERROR] ok")
        self.assertEqual(p.level, "error")
        self.assertEqual(p.message, "ok")


class TestLaravelParser(unittest.TestCase):
    def setUp(self):
        self.parser = LaravelParser()

    def test_warning_line(self):
        p = self.parser.parse('[2024-12-10 08:00:01] production.WARNING: slow query {"ms":500}')
        self.assertEqual(p.timestamp, "2024-12-10 08:00:01")
        self.assertEqual(p.level, "warning")
        self.assertEqual(p.message, 'slow query {"ms":500}')

    def test_iso_timestamp(self):
        p = self.parser.parse("[2024-12-10T08:00:01.123456+00:00] production.INFO: User login")
        self.assertEqual(p.timestamp, "2024-12-10T08:00:01.123456+00:00")
        self.assertEqual(p.level, "info")
        self.assertEqual(p.message, "User login")

    def test_severity_mapping(self):
        cases = {
            "EMERGENCY": "error",
            "ALERT": "error",
            "CRITICAL": "error",
            "ERROR": "error",
            "WARNING": "warning",
            "NOTICE": "info",
            "INFO": "info",
            "DEBUG": "debug",
            "CUSTOM": "info",
        }
        for severity, expected in cases.items():
            with self.subTest(severity=severity):
                p = self.parser.parse(f"[2024-12-10 08:00:01] local.{severity}: message")
                self.assertEqual(p.level, expected)

    def test_stack_frame_is_error(self):
        line = "#0 /var/www/vendor/laravel/framework/src/Foo.php(12): bar()"
        p = self.parser.parse(line)
        self.assertEqual(p.level, "error")
        self.assertIsNone(p.timestamp)
        self.assertEqual(p.message, line)

    def test_indented_stack_frame_is_error(self):
        self.assertEqual(self.parser.parse("   #12 {main}").level, "error")

    def test_unmatched_exception_line_is_error(self):
        self.assertEqual(self.parser.parse("PHP Fatal error:  Uncaught TypeError").level, "error")

    def test_unmatched_plain_line_is_info(self):
        p = self.parser.parse("[stacktrace]")
        self.assertEqual(p.level, "info")
        self.assertIsNone(p.timestamp)
        self.assertEqual(p.message, "[stacktrace]")


class TestFastApiParser(unittest.TestCase):
    def setUp(self):
        self.parser = FastApiParser()

    def test_uvicorn_access_line(self):
        p = self.parser.parse('INFO:     127.0.0.1:52340 - "GET /health HTTP/1.1" 200 OK')
        self.assertIsNone(p.timestamp)
        self.assertEqual(p.level, "info")
        self.assertEqual(p.message, '127.0.0.1:52340 - "GET /health HTTP/1.1" 200 OK')

    def test_uvicorn_levels(self):
        self.assertEqual(self.parser.parse("ERROR:    Exception in ASGI application").level, "error")
        self.assertEqual(self.parser.parse("WARNING:  StatReload detected changes").level, "warning")
        self.assertEqual(self.parser.parse("debug:    connection open").level, "debug")
        self.assertEqual(self.parser.parse("CRITICAL: worker died").level, "error")

    def test_python_logging_line(self):
        p = self.parser.parse("2024-12-10 08:00:01,234 - app.db - WARNING - slow query")
        self.assertEqual(p.timestamp, "2024-12-10 08:00:01,234")
        self.assertEqual(p.level, "warning")
        self.assertEqual(p.message, "slow query")

    def test_python_logging_critical_is_error(self):
        p = self.parser.parse("2024-12-10 08:00:01,234 - app - CRITICAL - database down")
        self.assertEqual(p.level, "error")

    def test_json_line(self):
        p = self.parser.parse('{"time": "2024-12-10T08:00:01Z", "msg": "started", "levelname": "WARNING"}')
        self.assertEqual(p.timestamp, "2024-12-10T08:00:01Z")
        self.assertEqual(p.level, "warning")
        self.assertEqual(p.message, "started")

    def test_json_key_priority(self):
        p = self.parser.parse('{"timestamp": "a", "time": "b", "message": "m", "msg": "x", "level": "fatal"}')
        self.assertEqual(p.timestamp, "a")
        self.assertEqual(p.message, "m")
        self.assertEqual(p.level, "error")

    def test_json_without_level_defaults_to_info(self):
        p = self.parser.parse('{"event": "login", "user": 1}')
        self.assertEqual(p.level, "info")
        self.assertEqual(p.message, "login")
        self.assertIsNone(p.timestamp)

    def test_json_non_string_message(self):
        p = self.parser.parse('{"message": {"a": 1}}')
        self.assertEqual(p.message, '{"a": 1}')

    def test_invalid_json_falls_through(self):
        line = '{"message": "oops", broken'
        p = self.parser.parse(line)
        self.assertEqual(p.level, "info")
        self.assertEqual(p.message, line)

    def test_json_array_uses_fallback(self):
        self.assertEqual(self.parser.parse('["error"]').level, "error")

    def test_fallback_heuristics(self):
        self.assertEqual(self.parser.parse("Traceback (most recent call last):").level, "error")
        self.assertEqual(self.parser.parse("DeprecationWarning: old API").level, "warning")
        self.assertEqual(self.parser.parse("running in debug mode").level, "debug")
        self.assertEqual(self.parser.parse('  File "/app/main.py", line 3').level, "info")

    def test_fallback_ignores_bare_warn(self):
        self.assertEqual(self.parser.parse("warn only").level, "info")


if __name__ == "__main__":
    unittest.main()
