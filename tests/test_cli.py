import pytest
from PIL import Image

from asciivid.cli import build_parser, main
from asciivid.config import RenderSettings


@pytest.fixture
def grey_png(tmp_path):
    path = tmp_path / "grey.png"
    Image.new("RGB", (4, 4), (128, 128, 128)).save(path)
    return path


def test_defaults():
    args = build_parser().parse_args(["-i", "x.png"])
    settings = RenderSettings.from_args(args)
    assert (settings.box.max_width, settings.box.max_height) == (600, 140)
    assert settings.output_path is None


def test_output_flag_selects_transcript():
    settings = RenderSettings.from_args(build_parser().parse_args(["-i", "x.png", "--output", "-w", "80", "-h", "20"]))
    assert str(settings.output_path) == "output.txt"
    assert (settings.box.max_width, settings.box.max_height) == (80, 20)


def test_renders_image_to_terminal(grey_png, capsys):
    assert main(["-i", str(grey_png)]) == 0
    out = capsys.readouterr().out
    assert out == ("\033[38;2;128;128;128m=\033[0m" * 4 + "\n") * 2


def test_output_writes_output_txt_in_cwd(grey_png, tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    assert main(["-i", str(grey_png), "--output"]) == 0
    assert (tmp_path / "output.txt").read_text() == "====\n====\n"
    assert capsys.readouterr().out == ""


@pytest.mark.parametrize("argv", [[], ["-i"], ["-w", "10"], ["-i", "x.png", "-w", "ten"]])
def test_usage_errors_exit_one(argv, capsys):
    assert main(argv) == 1
    err = capsys.readouterr().err
    assert "usage: asciivid" in err


@pytest.mark.parametrize("flag", ["-w", "-h"])
@pytest.mark.parametrize("value", ["0", "-5"])
def test_non_positive_bounds_exit_one(flag, value, grey_png, capsys):
    assert main(["-i", str(grey_png), flag, value]) == 1
    captured = capsys.readouterr()
    assert "must be a positive number" in captured.err
    assert captured.out == ""


def test_help_exits_zero(capsys):
    with pytest.raises(SystemExit) as info:
        main(["--help"])
    assert info.value.code == 0
    assert "-i <file>" in capsys.readouterr().out


def test_decode_error_exits_one(tmp_path, capsys):
    bad = tmp_path / "bad.png"
    bad.write_bytes(b"not an image")
    assert main(["-i", str(bad)]) == 1
    assert capsys.readouterr().err.startswith("Error: Cannot decode image")


def test_missing_video_exits_one(tmp_path, capsys):
    assert main(["-i", str(tmp_path / "missing.mp4")]) == 1
    assert "Error:" in capsys.readouterr().err


def test_unwritable_output_exits_one(grey_png, tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "output.txt").mkdir()
    assert main(["-i", str(grey_png), "--output"]) == 1
    assert "Cannot open output.txt" in capsys.readouterr().err


def test_image_over_pixel_limit_exits_one(tmp_path, monkeypatch, capsys):
    path = tmp_path / "huge.png"
    Image.new("1", (8, 8), 1).save(path)
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 10)
    monkeypatch.chdir(tmp_path)
    assert main(["-i", str(path), "--output", "-w", "10", "-h", "10"]) == 1
    assert capsys.readouterr().err.startswith("Error: Image")


@pytest.mark.parametrize("argv, level", [([], "WARNING"), (["-v"], "DEBUG")])
def test_verbose_setting_drives_log_level(argv, level, grey_png, monkeypatch, capsys):
    levels = []
    monkeypatch.setattr("asciivid.cli.configure_logging", lambda verbose: levels.append(verbose))
    assert main(["-i", str(grey_png), *argv]) == 0
    assert levels == [level == "DEBUG"]
