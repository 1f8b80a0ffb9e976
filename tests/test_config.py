from fuspil.config import Config


def test_save_and_read(tmp_path):
    filename = str(tmp_path / "config.ini")
    config = Config()
    config.star = "/opt/star/STAR"
    config.star_fusion_ref = "/refs/ctat"
    config.threads = 16
    config.use_mongodb = True
    config.mongodb_port = 27018
    config.save(filename)

    loaded = Config(filename)

    assert loaded.star == "/opt/star/STAR"
    assert loaded.star_fusion_ref == "/refs/ctat"
    assert loaded.threads == 16
    assert loaded.workers == 5
    assert loaded.use_mongodb is True
    assert loaded.mongodb_port == 27018


def test_missing_and_invalid_sections(tmp_path, capsys):
    filename = tmp_path / "config.ini"
    filename.write_text("[EXECUTABLES]\narriba = /opt/arriba\n\n[TOOLS]\nfoo = bar\n")

    config = Config(str(filename))

    assert config.arriba == "/opt/arriba"
    assert config.read_length == 100
    stderr = capsys.readouterr().err
    assert "FILES section in config not found" in stderr
    assert "'TOOLS' section is invalid" in stderr


def test_check_programs(config, tmp_path):
    config.squid = str(tmp_path / "bin" / "not_installed")

    assert config.check_programs(["star", "arriba", "squid"]) == ["squid"]
    assert config.check_programs([]) == []
