import json

from scripts.run_compliance_review import main


def test_cli_writes_json_and_markdown(tmp_path, monkeypatch, capsys):
    monkeypatch.setenv("DUTY_DATA_SOURCE", "csv")
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    (data_dir / "ConsumerSupport.csv").write_text(
        "Support_ID,Avg_Wait_Time_Min,First_Contact_Resolution,CSAT_Score\nS-1,12,No,4\n",
        encoding="utf-8",
    )
    out_dir = tmp_path / "out"

    code = main(
        [
            "--data-dir",
            str(data_dir),
            "--store",
            str(tmp_path / "rules.json"),
            "--output-dir",
            str(out_dir),
        ]
    )

    assert code == 0
    review = json.loads((out_dir / "compliance_review.json").read_text(encoding="utf-8"))
    assert [p["pillar"] for p in review["pillars"]] == ["consumer-support"]
    assert len(review["missing_datasets"]) == 3
    assert review["pillars"][0]["findings"][0]["id"] == "S-1"

    markdown = (out_dir / "compliance_review.md").read_text(encoding="utf-8")
    assert "## Missing datasets" in markdown
    assert "## consumer-support (default-analyzer)" in markdown
    assert "- Thresholds: Wait > 8m" in markdown
    assert "### S-1 · Support Interaction S-1 [high]" in markdown
    assert "Wrote" in capsys.readouterr().out


def test_cli_limits_to_requested_pillar(tmp_path, monkeypatch):
    monkeypatch.setenv("DUTY_DATA_SOURCE", "csv")
    out_dir = tmp_path / "out"
    main(
        [
            "--data-dir",
            str(tmp_path),
            "--pillar",
            "price-value",
            "--output-dir",
            str(out_dir),
            "--store",
            str(tmp_path / "r.json"),
        ]
    )
    review = json.loads((out_dir / "compliance_review.json").read_text(encoding="utf-8"))
    assert review["pillars"] == []
    assert review["missing_datasets"] == ["PriceValue.csv"]
