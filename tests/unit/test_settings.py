from imgdeps.CONFIG.settings import load_options

def test_load_from_environ(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    options = load_options(environ={"EXHORT_IMAGE_PLATFORM": "linux/amd64", "HOME": "/root"})
    assert options.image_platform == "linux/amd64"

def test_environ_overrides_env_file(tmp_path):
    env_file = tmp_path / "analysis.env"
    env_file.write_text("RHDA_TOKEN=from-file\nRHDA_SOURCE=file\nOTHER=1\n")

    options = load_options(env_file=str(env_file), environ={"RHDA_TOKEN": "from-env"})
    assert options.token == "from-env"
    assert options.source == "file"

def test_default_env_file_in_cwd(tmp_path, monkeypatch):
    (tmp_path / ".env").write_text('EXHORT_SYFT_PATH="/opt/bin/syft"\n')
    monkeypatch.chdir(tmp_path)

    options = load_options(environ={})
    assert options.syft_path == "/opt/bin/syft"
