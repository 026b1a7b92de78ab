# backend/app.py
from flask import Flask, request, jsonify, abort, current_app
from flask_cors import CORS
from werkzeug.exceptions import BadRequest, HTTPException

from balances import calculate_balances, total_expenses
from config import config as default_config
from errors import MemberInUseError, SplitError, UnbalancedLedgerError
from models import Expense
from settlement import plan_settlements
from store import GroupStore


def create_app(overrides=None):
    app = Flask(__name__)
    app.config.from_object(default_config)
    if overrides:
        app.config.update(overrides)
    app.json.sort_keys = False  # balances keep roster order

    CORS(app, resources={r"/api/*": {"origins": app.config["CORS_ORIGINS"]}})  # Lets the frontend call the API

    app.extensions["group_store"] = GroupStore()

    register_error_handlers(app)
    register_routes(app)
    return app


def register_error_handlers(app):
    @app.errorhandler(SplitError)
    def split_error(e):
        app.logger.warning("Rejected request: %s", e)
        status = 409 if isinstance(e, (UnbalancedLedgerError, MemberInUseError)) else 400
        return jsonify({"error": e.message, "type": type(e).__name__, "details": e.details}), status

    @app.errorhandler(HTTPException)
    def http_error(e):
        return jsonify({"error": e.description}), e.code

    @app.errorhandler(Exception)
    def unexpected_error(e):
        app.logger.exception("Unhandled error")
        return jsonify({"error": str(e)}), 500


def _store():
    return current_app.extensions["group_store"]


def _json_body():
    data = request.get_json(silent=True)
    if data is None:
        raise BadRequest("Request body must be JSON")
    return data


def _parse_expense(item):
    try:
        return Expense.from_dict(item)
    except (KeyError, TypeError, ValueError) as e:
        raise BadRequest(f"Malformed expense: {e!r}")


def _member_names(value, field):
    if not isinstance(value, list) or not all(isinstance(m, str) for m in value):
        raise BadRequest(f"'{field}' must be a list of names")
    return value


def _group_or_404(group_id):
    try:
        return _store().get_group(group_id)
    except KeyError:
        abort(404, description=f"Group {group_id} not found")


def _settlement_payload(balances, settlements):
    symbol = current_app.config["CURRENCY_SYMBOL"]
    return {
        "balances": {m: b.to_dict() for m, b in balances.items()},
        "settlements": [s.to_dict() for s in settlements],
        "summary": [s.describe(symbol) for s in settlements] or ["All settled up!"],
    }


def register_routes(app):
    # --- 1. HEALTH CHECK ROUTE ---
    @app.route('/api', methods=['GET'])
    def health_check():
        return jsonify({"status": "healthy", "message": "Backend is running!"})

    # --- 2. STATELESS CALCULATION ROUTE ---
    @app.route('/api/calculate', methods=['POST'])
    def calculate():
        data = _json_body()
        if not isinstance(data, dict):
            raise BadRequest("Expected an object with 'members' and 'expenses'")

        # Convert JSON data into our Python objects
        members = _member_names(data.get("members", []), "members")

        expenses = data.get("expenses", [])
        if not isinstance(expenses, list):
            raise BadRequest("'expenses' must be a list")
        expenses_list = [_parse_expense(item) for item in expenses]

        permissive = data.get("permissive", app.config["PERMISSIVE_MEMBERS"])
        if not isinstance(permissive, bool):
            raise BadRequest("'permissive' must be true or false")

        balances = calculate_balances(members, expenses_list, permissive=permissive)
        settlements = plan_settlements(balances, epsilon=app.config["EPSILON"])
        return jsonify(_settlement_payload(balances, settlements))

    # --- 3. GROUPS ---
    @app.route('/api/groups', methods=['POST'])
    def create_group():
        data = _json_body()
        name = data.get("name") if isinstance(data, dict) else None
        members = data.get("members") if isinstance(data, dict) else None
        if not name or not members:
            raise BadRequest("A group needs a name and at least one member")

        group = _store().create_group(name, _member_names(members, "members"))
        app.logger.info("Created group %s with %d members", group["id"], len(group["members"]))
        return jsonify(group), 201

    @app.route('/api/groups', methods=['GET'])
    def list_groups():
        return jsonify(_store().list_groups())

    @app.route('/api/groups/<int:group_id>', methods=['GET'])
    def get_group(group_id):
        return jsonify(_group_or_404(group_id))

    @app.route('/api/groups/<int:group_id>', methods=['DELETE'])
    def delete_group(group_id):
        _group_or_404(group_id)
        _store().delete_group(group_id)
        app.logger.info("Deleted group %s", group_id)
        return jsonify({"message": "Group deleted"})

    @app.route('/api/groups/<int:group_id>/members', methods=['POST'])
    def add_member(group_id):
        _group_or_404(group_id)
        data = _json_body()
        name = data.get("name") if isinstance(data, dict) else None
        if not isinstance(name, str) or not name:
            raise BadRequest("A member needs a name")

        group = _store().add_member(group_id, name)
        app.logger.info("Added %s to group %s", name, group_id)
        return jsonify(group)

    @app.route('/api/groups/<int:group_id>/members/<member>', methods=['DELETE'])
    def remove_member(group_id, member):
        group = _group_or_404(group_id)
        if member not in group["members"]:
            abort(404, description=f"{member} is not in group {group_id}")

        group = _store().remove_member(group_id, member)
        app.logger.info("Removed %s from group %s", member, group_id)
        return jsonify(group)

    # --- 4. EXPENSES ---
    @app.route('/api/expenses/<int:group_id>', methods=['GET'])
    def list_expenses(group_id):
        _group_or_404(group_id)
        return jsonify([e.to_dict() for e in _store().list_expenses(group_id)])

    @app.route('/api/expenses/<int:group_id>', methods=['POST'])
    def add_expense(group_id):
        group = _group_or_404(group_id)
        data = _json_body()
        # Rejects empty splits, bad amounts and strangers before storing
        calculate_balances(group["members"], [_parse_expense(data)])

        expense = _store().add_expense(group_id, data)
        app.logger.info("Added expense %s to group %s", expense.id, group_id)
        return jsonify(expense.to_dict()), 201

    @app.route('/api/expenses/<int:expense_id>', methods=['DELETE'])
    def delete_expense(expense_id):
        if not _store().delete_expense(expense_id):
            abort(404, description=f"Expense {expense_id} not found")
        app.logger.info("Deleted expense %s", expense_id)
        return jsonify({"message": "Expense deleted"})

    # --- 5. BALANCES & SETTLE UP ---
    @app.route('/api/groups/<int:group_id>/balances', methods=['GET'])
    def group_balances(group_id):
        group = _group_or_404(group_id)
        expenses = _store().list_expenses(group_id)
        balances = calculate_balances(group["members"], expenses)
        return jsonify({
            "balances": {m: b.to_dict() for m, b in balances.items()},
            "total": total_expenses(expenses),
        })

    @app.route('/api/groups/<int:group_id>/settlements', methods=['GET'])
    def group_settlements(group_id):
        group = _group_or_404(group_id)
        balances = calculate_balances(group["members"], _store().list_expenses(group_id))
        settlements = plan_settlements(balances, epsilon=app.config["EPSILON"])
        return jsonify(_settlement_payload(balances, settlements))

    @app.route('/api/groups/<int:group_id>/settle', methods=['POST'])
    def mark_all_settled(group_id):
        _group_or_404(group_id)
        cleared = _store().clear_expenses(group_id)
        app.logger.info("Group %s settled up, cleared %d expenses", group_id, cleared)
        return jsonify({"message": "All expenses settled up", "cleared": cleared})


app = create_app()

if __name__ == '__main__':
    app.run(debug=app.config["DEBUG"], port=app.config["PORT"])
