import re
from decimal import Decimal
from pathlib import Path
from typing import Dict, Mapping, Union

from weightwatch.errors import TemplateSubstitutionError
from weightwatch.models import ExplicitRange, RenderParams

TEMPLATE_DIR = Path(__file__).parent / "templates"

TOKEN_RE = re.compile(r"\{\{(.*?)\}\}", re.S)


def load_template(name: Union[str, Path]) -> str:
    """Read a bundled template by file name, or any other template by path."""
    path = Path(name)
    # bare file names prefer the bundled templates over the cwd
    if path.name == str(name) and (TEMPLATE_DIR / path).exists():
        path = TEMPLATE_DIR / path
    return path.expanduser().read_text()


def _number(d: Decimal) -> str:
    # 180.0 -> "180", 184.90 -> "184.9"
    return format(d.normalize(), "f")


def template_values(params: RenderParams) -> Dict[str, str]:
    values = {
        "date_start": params.date_start.isoformat(),
        "date_end": params.date_end.isoformat(),
        "name": str(params.data_file),
        "output": str(params.output),
        "yrange": "",
    }
    wr = params.weight_range
    if isinstance(wr, ExplicitRange):
        values["weight_start"] = _number(wr.start)
        values["weight_end"] = _number(wr.end)
        values["yrange"] = f"set yrange [{values['weight_start']}:{values['weight_end']}]"
    return values


def render(template: str, values: Mapping[str, str]) -> str:
    missing = [t.strip() for t in TOKEN_RE.findall(template) if t.strip() not in values]
    if missing:
        raise TemplateSubstitutionError(missing)
    return TOKEN_RE.sub(lambda m: str(values[m.group(1).strip()]), template)


def render_script(template: str, params: RenderParams) -> str:
    return render(template, template_values(params))
