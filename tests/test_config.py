from buildstamp.config import DEFAULTS, get_config, load_config, validate_config


def test_returns_defaults_if_missing(tmp_path):
    cfg = load_config(tmp_path / 'DOES_NOT_EXIST.yaml')
    assert cfg['fallback'] == 'unknown'
    assert cfg['config_version'] == 'defaults'


def test_load_default_path():
    cfg = get_config(refresh=True)
    for key in DEFAULTS:
        assert key in cfg
    assert cfg['target_env'] == 'TARGET'
    assert cfg['profile_env'] == 'PROFILE'


def test_override_merges_over_defaults(tmp_path):
    path = tmp_path / 'settings.yaml'
    path.write_text('fallback: n/a\noutput_format: json\n')
    cfg = load_config(path)
    assert cfg['fallback'] == 'n/a'
    assert cfg['output_format'] == 'json'
    assert cfg['git_executable'] == 'git'
    assert len(cfg['config_version']) == 12


def test_malformed_file_uses_defaults(tmp_path):
    path = tmp_path / 'settings.yaml'
    path.write_text('fallback: [unclosed\n')
    cfg = load_config(path)
    assert cfg['fallback'] == 'unknown'


def test_non_mapping_document_uses_defaults(tmp_path):
    path = tmp_path / 'settings.yaml'
    path.write_text('- just\n- a list\n')
    assert load_config(path)['output_format'] == 'directives'


def test_environment_override(tmp_path, monkeypatch):
    path = tmp_path / 'custom.yaml'
    path.write_text('target_env: CARGO_TARGET\n')
    monkeypatch.setenv('BUILDSTAMP_CONFIG', str(path))
    assert load_config()['target_env'] == 'CARGO_TARGET'


def test_mistyped_values_fall_back_to_defaults(tmp_path):
    path = tmp_path / 'settings.yaml'
    path.write_text('fallback: null\ntarget_env: null\nprofile_env: 3\ngit_executable: ""\n'
                    'probe_timeout: -1\noutput_format: json\n')
    cfg = load_config(path)
    assert cfg['fallback'] == 'unknown'
    assert cfg['target_env'] == 'TARGET'
    assert cfg['profile_env'] == 'PROFILE'
    assert cfg['git_executable'] == 'git'
    assert cfg['probe_timeout'] is None
    assert cfg['output_format'] == 'json'


def test_validate_config_keeps_valid_and_unknown_keys():
    cleaned = validate_config({'fallback': '', 'probe_timeout': 2.5, 'extra': None})
    assert cleaned == {'fallback': '', 'probe_timeout': 2.5, 'extra': None}
