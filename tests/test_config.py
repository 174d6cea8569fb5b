from pathlib import Path

from forth_interactive import Settings


class TestSettings():
    def test_defaults(self):
        settings = Settings()

        assert settings.prompt == '>> '
        assert settings.capture_prompt == 'i> '
        assert settings.history_path == Path('history.txt')
        assert settings.capture_history_path == Path('interactive_history.txt')
        assert settings.gas_limit == 100

    def test_empty_environment(self):
        assert Settings.from_env({}) == Settings()

    def test_overrides(self, tmp_path):
        settings = Settings.from_env({
            'FORTH_PROMPT': 'ok> ',
            'FORTH_CAPTURE_PROMPT': '.. ',
            'FORTH_HISTORY': str(tmp_path / 'main'),
            'FORTH_CAPTURE_HISTORY': str(tmp_path / 'capture'),
            'FORTH_GAS_LIMIT': '250',
            'FORTH_LOG_LEVEL': 'debug',
        })

        assert settings.prompt == 'ok> '
        assert settings.capture_prompt == '.. '
        assert settings.history_path == tmp_path / 'main'
        assert settings.capture_history_path == tmp_path / 'capture'
        assert settings.gas_limit == 250
        assert settings.log_level == 'DEBUG'

    def test_unlimited_gas(self):
        for raw in ('unlimited', 'UNLIMITED', 'none', '0'):
            assert Settings.from_env({'FORTH_GAS_LIMIT': raw}).gas_limit is None

    def test_bad_gas_limit_falls_back(self, caplog):
        for raw in ('lots', '-5'):
            assert Settings.from_env({'FORTH_GAS_LIMIT': raw}).gas_limit == 100

        assert 'FORTH_GAS_LIMIT' in caplog.text

    def test_reads_os_environ(self, monkeypatch):
        monkeypatch.setenv('FORTH_GAS_LIMIT', '7')

        assert Settings.from_env().gas_limit == 7
