import json
from pathlib import Path

from typer.testing import CliRunner

from staffline.cli.app import app

runner = CliRunner()


def test_calc_prints_rounded_totals() -> None:
    result = runner.invoke(
        app,
        ["calc", "--hours", "4", "--rate", "25", "--markup-type", "Percent", "--markup-value", "20", "--commission", "10"],
    )
    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert data == {
        "base_total": "100.00",
        "client_total": "120.00",
        "provider_total": "90.00",
        "profit": "30.00",
        "profit_margin": "25.00",
    }


def test_calc_rejects_bad_numbers() -> None:
    assert runner.invoke(app, ["calc", "--hours", "four", "--rate", "25"]).exit_code != 0
    assert runner.invoke(app, ["calc", "--hours", "4", "--rate", "25", "--markup-type", "Percent"]).exit_code != 0


def test_review_bill_and_pdf_from_cli(make_application, make_client) -> None:
    application = make_application()
    company = make_client()

    review = runner.invoke(
        app,
        ["applications", "review", "--application-id", str(application.id), "--status", "approved", "--reviewer", "admin"],
    )
    assert review.exit_code == 0, review.output
    provider_id = json.loads(review.stdout)["provider"]["id"]

    bill = runner.invoke(
        app,
        [
            "bills",
            "create",
            "--client-id",
            str(company.id),
            "--provider-id",
            str(provider_id),
            "--service",
            "House Cleaning",
            "--hours",
            "4",
            "--rate",
            "25",
        ],
    )
    assert bill.exit_code == 0, bill.output
    bill_data = json.loads(bill.stdout)
    assert bill_data["total_client"] == "120.00"

    pdf = runner.invoke(app, ["bills", "pdf", "--bill-id", str(bill_data["id"])])
    assert pdf.exit_code == 0, pdf.output
    assert Path(json.loads(pdf.stdout)["path"]).read_bytes().startswith(b"%PDF")


def test_cli_reports_domain_errors() -> None:
    result = runner.invoke(
        app, ["applications", "review", "--application-id", "999", "--status", "approved", "--reviewer", "admin"]
    )
    assert result.exit_code == 1
    assert json.loads(result.stdout)["error"] == "not_found"


def test_report_and_bill_dates_must_be_iso() -> None:
    report = runner.invoke(app, ["report", "--start-date", "2026-01-01", "--end-date", "2100-01-01"])
    assert report.exit_code == 0, report.output
    assert json.loads(report.stdout)["total_bills"] == 0

    bad_report = runner.invoke(app, ["report", "--start-date", "last week"])
    assert bad_report.exit_code == 2
    assert not isinstance(bad_report.exception, ValueError)

    bad_bill = runner.invoke(
        app,
        [
            "bills",
            "create",
            "--client-id",
            "1",
            "--provider-id",
            "1",
            "--service",
            "Cooking",
            "--hours",
            "1",
            "--rate",
            "10",
            "--due-date",
            "15/11/2026",
        ],
    )
    assert bad_bill.exit_code == 2
    assert not isinstance(bad_bill.exception, ValueError)
