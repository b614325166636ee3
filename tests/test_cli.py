from mcndsolve.cli import DATA_HEADER, main

FEASIBLE = "MULTIGEN.DAT:\n2 1 1\n1 2 3 10 7\n1 2 5\n"
INFEASIBLE = "MULTIGEN.DAT:\n2 1 1\n1 2 3 1 7\n1 2 5\n"


def _write(tmp_path, text, name="inst.dat"):
    path = tmp_path / name
    path.write_text(text)
    return path


def test_wrong_argument_count(capsys):
    assert main([]) == 0
    assert "Nombre de parametre non valide" in capsys.readouterr().out


def test_missing_file(tmp_path, capsys):
    assert main([str(tmp_path / "absent.dat")]) == 1
    assert "Failure to open datafile" in capsys.readouterr().err


def test_solves_and_writes_reports(tmp_path, capsys):
    path = _write(tmp_path, FEASIBLE)
    summary = tmp_path / "fileout"
    out_dir = tmp_path / "RESULTAT"
    code = main([str(path), "--summary", str(summary), "--output-dir", str(out_dir)])
    assert code == 0
    out = capsys.readouterr().out
    assert "Une solution a été trouvée." in out
    assert "Arc activé : 1 -> 2" in out
    assert summary.read_text().startswith(f"{path} lb: ")
    solution = (out_dir / "inst.txt").read_text().splitlines()
    assert solution[0] == "Nombre d'arcs actifs: 1"
    assert solution[-1] == "Valeur totale: 22"


def test_infeasible_instance(tmp_path, capsys):
    path = _write(tmp_path, INFEASIBLE)
    out_dir = tmp_path / "RESULTAT"
    code = main([str(path), "--summary", str(tmp_path / "fileout"), "--output-dir", str(out_dir)])
    assert code == 0
    assert "infaisable" in capsys.readouterr().out
    assert not out_dir.exists()


def test_collect_writes_header(tmp_path, capsys):
    path = _write(tmp_path, FEASIBLE)
    data = tmp_path / "branching_data.csv"
    assert main([str(path), "--collect", "--data", str(data)]) == 0
    assert data.read_text().splitlines()[0] == DATA_HEADER
    assert "Statut: Succès" in capsys.readouterr().out