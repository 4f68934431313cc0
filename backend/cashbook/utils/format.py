from datetime import date


def format_date(d: date) -> str:
    return d.strftime("%d/%m/%Y")


def format_amount(v: float) -> str:
    return f"{v:.2f}"


def format_percentage(v: float | None) -> str:
    if v is None:
        return "∞"
    return f"{v:.2f}"
