import logging
import os
from uuid import uuid4

import click
from flask import Flask, redirect, render_template, request, session, url_for

from boat_calc.engine import BOAT_TYPES, compute_budget, cost_per_person
from boat_calc.formatter import format_kr, role_label
from boat_calc.main import build_financing_from_options, run_financing
from boat_calc.utils import parse_amount
from boat_calc_web.boat_store import create_boat_store_from_env
from boat_calc_web.scenario_store import create_scenario_store_from_env

logger = logging.getLogger(__name__)

app = Flask(__name__)
app.config["ASSET_VERSION"] = os.environ.get("ASSET_VERSION", "1")
app.secret_key = os.environ.get("FLASK_SECRET_KEY", "dev-secret-key")
app.jinja_env.filters["kr"] = format_kr

DATABASE_URL = os.environ.get("BOAT_CALC_DATABASE_URL")
scenario_store = create_scenario_store_from_env(
    DATABASE_URL, keep_latest=int(os.environ.get("BOAT_CALC_MAX_SCENARIOS", "10"))
)
boat_store = create_boat_store_from_env(DATABASE_URL)

DEFAULTS = {
    "price": "750000",
    "rate": "4.5",
    "years": "5",
    "owners": "4",
    "annual_budget": "50000",
    "boat_type": "motorboat",
}

INPUT_ERRORS = (ValueError, ArithmeticError, click.ClickException)


def _ensure_user_token() -> str:
    token = session.get("user_token")
    if not token:
        token = uuid4().hex
        session["user_token"] = token
        session.modified = True
    return token


def _owner_count(form) -> int:
    try:
        return max(1, int(form.get("owners", DEFAULTS["owners"])))
    except ValueError:
        return int(DEFAULTS["owners"])


def _form_contributions(form, owners: int) -> list[str]:
    """Collect ``NAME:AMOUNT`` strings for the people present in the form."""
    entries = []
    for i in range(1, owners + 1):
        name_key, amount_key = f"name_{i}", f"amount_{i}"
        if name_key not in form and amount_key not in form:
            break
        name = form.get(name_key, "").strip() or f"Person {i}"
        amount = form.get(amount_key, "").strip() or "0"
        entries.append(f"{name}:{amount}")
    return entries


def _form_rows(form, owners: int) -> list[dict]:
    """Return the person rows to redisplay, exactly as typed, padded to ``owners``."""
    return [
        {
            "name": form.get(f"name_{i}", "").strip() or f"Person {i}",
            "amount": form.get(f"amount_{i}", "").strip(),
        }
        for i in range(1, owners + 1)
    ]


def _form_to_financing(form):
    owners = _owner_count(form)
    return build_financing_from_options(
        form.get("price", "").strip(),
        float(form.get("rate", "0") or 0),
        int(form.get("years", "0") or 0),
        owners,
        tuple(_form_contributions(form, owners)),
    )


def _run_financing(form):
    params, contributions = _form_to_financing(form)
    return params, run_financing(params, contributions)


def _handle_save_action(user_token: str, form, params, result) -> None:
    scenario_name = form.get("scenario_name", "").strip() or "Scenario"
    scenario_store.save(user_token, scenario_name, params, result)


@app.route("/", methods=["GET", "POST"])
def index():
    financing = None
    budget = None
    error = None
    action = "financing"
    form = dict(DEFAULTS)

    user_token = _ensure_user_token()

    if request.method == "POST":
        action = request.form.get("action", "financing")
        form.update(request.form.to_dict())
        try:
            if action == "budget":
                budget = compute_budget(
                    parse_amount(form["annual_budget"]), _owner_count(form), form["boat_type"]
                )
            else:
                params, financing = _run_financing(request.form)
                if action == "save_scenario":
                    _handle_save_action(user_token, request.form, params, financing)
        except INPUT_ERRORS as exc:
            logger.warning("Rejected %s input: %s", action, exc)
            error = str(exc)

    return render_template(
        "index.html",
        form=form,
        financing=financing,
        budget=budget,
        people=_form_rows(form, _owner_count(form)),
        boat_types=BOAT_TYPES,
        role_label=role_label,
        error=error,
        last_action=action,
        asset_version=app.config["ASSET_VERSION"],
        saved_plans=scenario_store.plans_for(user_token),
    )


@app.post("/comparison/remove")
def remove_comparison():
    user_token = session.get("user_token")
    try:
        scenario_store.delete(user_token, int(request.form.get("scenario_id", "")))
    except ValueError:
        logger.warning("Ignoring removal of unknown plan %r", request.form.get("scenario_id"))
    return redirect(url_for("index"))


@app.post("/comparison/clear")
def clear_comparisons():
    user_token = session.get("user_token")
    scenario_store.delete_all(user_token)
    return redirect(url_for("index"))


@app.get("/boats")
def boats():
    family_size = _owner_count(request.args)
    listing = boat_store.list_boats()
    for boat in listing:
        boat["cost_per_person"] = cost_per_person(boat["price"], family_size)
    return render_template(
        "boats.html",
        boats=listing,
        family_size=family_size,
        error=request.args.get("error"),
        asset_version=app.config["ASSET_VERSION"],
    )


@app.post("/boats/add")
def add_boat():
    form = request.form
    try:
        boat_store.add_boat(
            form.get("name", ""),
            parse_amount(form.get("price", "")),
            year=form.get("year", "").strip(),
            length=form.get("length", "").strip(),
            engine=form.get("engine", "").strip(),
            finn_url=form.get("finn_url", "").strip(),
            description=form.get("description", "").strip(),
        )
    except ValueError as exc:
        logger.warning("Rejected boat: %s", exc)
        return redirect(url_for("boats", error=str(exc)))
    return redirect(url_for("boats"))


@app.post("/boats/<int:boat_id>/vote")
def vote_boat(boat_id: int):
    try:
        boat_store.vote(boat_id, request.form.get("vote", ""))
    except ValueError as exc:
        return redirect(url_for("boats", error=str(exc)))
    return redirect(url_for("boats"))


@app.post("/boats/<int:boat_id>/remove")
def remove_boat(boat_id: int):
    boat_store.remove_boat(boat_id)
    return redirect(url_for("boats"))


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    print("Starting boat calculator web app...")
    app.run(host="0.0.0.0", port=8710, debug=True)
