import unittest

from votechess import config


class ConfigTests(unittest.TestCase):
    def test_bool_parsing(self):
        for val in (True, "true", "1", "YES", " on "):
            self.assertTrue(config._as_bool(val))
        for val in (False, "false", "0", "no", ""):
            self.assertFalse(config._as_bool(val))

    def test_seed_parsing(self):
        self.assertIsNone(config._as_seed(None))
        self.assertIsNone(config._as_seed(" "))
        self.assertEqual(config._as_seed("42"), 42)

    def test_settings_types(self):
        s = config.SETTINGS
        self.assertIsInstance(s.turn_interval_s, float)
        self.assertIsInstance(s.port, int)
        self.assertGreater(s.top_n, 0)
        self.assertEqual(s.log_level, s.log_level.upper())


class ServerBuildTests(unittest.TestCase):
    def test_build_wires_engine_scheduler_and_app(self):
        import server

        engine, scheduler, app = server.build(60.0, 0, 7, False, None)
        self.assertIs(scheduler.engine, engine)
        self.assertEqual(scheduler.interval_s, 60.0)
        self.assertFalse(scheduler.is_running())
        resp = app.test_client().get("/api/moves")
        self.assertEqual(len(resp.get_json()), 20)


if __name__ == "__main__":
    unittest.main()
