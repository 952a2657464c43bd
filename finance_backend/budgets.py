# finance_backend/budgets.py
from .resources import Resource, resource_blueprint

BUDGET_PERIODS = ("weekly", "monthly", "yearly")


class BudgetResource(Resource):
    # spent_amount is stored as given; progress against transactions is computed by the client
    name = "budgets"
    table = "budgets"
    columns = ("category", "budget_amount", "spent_amount", "currency", "period")

    def rules(self, v, user_id):
        v.string("category", required=True, msg="Category is required")
        v.number("budget_amount", required=True, minimum=0, msg="Budget amount is required")
        v.number("spent_amount", default=0.0, minimum=0)
        v.currency("currency")
        v.choice("period", BUDGET_PERIODS, default="monthly")


budgets = BudgetResource()
bp = resource_blueprint(budgets, "/api/budgets")
