import fitz

from loto.models.procedure import Procedure
from loto.services.demo_seed import DEMO_PROCEDURES


def test_seed_demo_is_idempotent(app):
    runner = app.test_cli_runner()

    result = runner.invoke(args=["seed-demo"])
    assert result.exit_code == 0, result.output
    assert Procedure.query.count() == len(DEMO_PROCEDURES)

    result = runner.invoke(args=["seed-demo"])
    assert result.exit_code == 0
    assert Procedure.query.count() == len(DEMO_PROCEDURES)


def test_export_procedure_writes_pdf(app, pdf_template, make_procedure, tmp_path):
    procedure = make_procedure(facility="Plant 7")
    out = tmp_path / "out.pdf"

    result = app.test_cli_runner().invoke(args=["export-procedure", procedure.id, str(out)])
    assert result.exit_code == 0, result.output

    with fitz.open(str(out)) as doc:
        fields = {w.field_name: w.field_value for page in doc for w in page.widgets()}
    assert fields["Facility"] == "Plant 7"


def test_export_procedure_unknown_id_fails(app, pdf_template, tmp_path):
    result = app.test_cli_runner().invoke(
        args=["export-procedure", "missing", str(tmp_path / "x.pdf")],
    )
    assert result.exit_code != 0
