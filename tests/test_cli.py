import json

import openpyxl
import pytest

from run_timetabler import main


@pytest.fixture
def workbook(tmp_path):
    path = tmp_path / "timetable.xlsx"
    main(["setup", "--workbook", str(path)])
    return path


def test_setup_creates_sheets(workbook):
    wb = openpyxl.load_workbook(workbook)
    assert {"TEACHERS", "CLASSES", "HOMEROOM_PINS", "OPTIONS"} <= set(wb.sheetnames)


def test_dry_run(workbook, capsys):
    main(["dry-run", "--workbook", str(workbook)])
    out = capsys.readouterr().out
    assert "group B R1 F: demand 3 / capacity 9" in out
    assert "All scarce roles fit." in out


def test_generate_then_validate(workbook, tmp_path, capsys):
    out_path = tmp_path / "week.json"
    main(["generate", "--workbook", str(workbook), "--out", str(out_path)])
    assert "Validation: OK" in capsys.readouterr().out

    document = json.loads(out_path.read_text(encoding="utf-8"))
    assert document["validation"]["isValid"] is True

    main(["validate", "--workbook", str(workbook), "--result", str(out_path)])
    assert "Validation: OK" in capsys.readouterr().out


def test_validate_exits_on_errors(workbook, tmp_path):
    out_path = tmp_path / "week.json"
    main(["generate", "--workbook", str(workbook), "--out", str(out_path)])
    document = json.loads(out_path.read_text(encoding="utf-8"))
    row = next(a for a in document["assignments"] if a["role"] == "K" and a["seat"] == "real")
    row["role"] = "F"
    out_path.write_text(json.dumps(document), encoding="utf-8")

    with pytest.raises(SystemExit) as info:
        main(["validate", "--workbook", str(workbook), "--result", str(out_path)])
    assert info.value.code == 1


def test_config_problems_exit_with_2(workbook, capsys):
    wb = openpyxl.load_workbook(workbook)
    wb["HOMEROOM_PINS"].append(["B", "R1C1", "John"])
    wb.save(workbook)

    with pytest.raises(SystemExit) as info:
        main(["dry-run", "--workbook", str(workbook)])
    assert info.value.code == 2
    assert "teacher is not in the local pool" in capsys.readouterr().out


def test_no_command_prints_help():
    with pytest.raises(SystemExit) as info:
        main([])
    assert info.value.code == 1
