from flask import Blueprint, request
from app.version import API_PREFIX
from app.exceptions import ValidationError
from app.services.reports import sales_report, stock_report, customer_dues_report, PERIODS
from app.utils import auth_required, current_owner_id, ok

reports_bp = Blueprint("reports", __name__, url_prefix=f"{API_PREFIX}/reports")


@reports_bp.route("/sales", methods=["GET"])
@auth_required
def get_sales_report():
    period = request.args.get("period")
    if period and period not in PERIODS:
        raise ValidationError(f"period must be one of {', '.join(PERIODS)}")
    return ok(sales_report(current_owner_id(), period=period))


@reports_bp.route("/stock", methods=["GET"])
@auth_required
def get_stock_report():
    return ok(stock_report(current_owner_id()))


@reports_bp.route("/customers", methods=["GET"])
@auth_required
def get_customer_report():
    return ok(customer_dues_report(current_owner_id()))
