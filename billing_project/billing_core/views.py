import json

from django.core.exceptions import ValidationError
from django.http import HttpResponseNotAllowed, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_POST

from . import authentication as auth
from .authentication import login_required_json
from .forms import (CustomerForm, InvoiceForm, PaymentForm, QuoteForm,
                    validated)
from .ratelimit import rate_limited
from .services import lifecycle


def _json_body(request):
    # Read request body as JSON object
    try:
        data = json.loads(request.body or b"{}")
    except (TypeError, ValueError):
        raise ValidationError("Request body must be valid JSON")
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


# ----------------------------
# Auth
# ----------------------------
@csrf_exempt
@require_POST
@rate_limited("auth")
def register_view(request):
    data = _json_body(request)
    name = str(data.get("name") or "").strip()
    email = str(data.get("email") or "").strip()
    password = str(data.get("password") or "")
    errors = {}
    if not name:
        errors["name"] = ["Name is required"]
    if "@" not in email:
        errors["email"] = ["Valid email is required"]
    if len(password) < 6:
        errors["password"] = ["Password must be at least 6 characters long"]
    if errors:
        raise ValidationError(errors)

    user = auth.register_user(name, email, password)
    return JsonResponse(
        {"token": auth.create_access_token(user), "user": auth.profile(user)},
        status=201,
    )


@csrf_exempt
@require_POST
@rate_limited("auth")
def login_view(request):
    data = _json_body(request)
    user = auth.login_user(str(data.get("email") or ""), str(data.get("password") or ""))
    return JsonResponse(
        {"token": auth.create_access_token(user), "user": auth.profile(user)})


@require_GET
@login_required_json
def profile_view(request):
    return JsonResponse(auth.profile(request.user))


# ----------------------------
# CRUD dispatch
# ----------------------------
def _collection(request, list_fn, create_fn, form_class):
    if request.method == "GET":
        return JsonResponse(list_fn(request.user), safe=False)
    if request.method == "POST":
        payload = validated(form_class, _json_body(request))
        return JsonResponse(create_fn(request.user, payload), status=201)
    return HttpResponseNotAllowed(["GET", "POST"])


def _detail(request, pk, get_fn, update_fn, delete_fn, form_class, label):
    if request.method == "GET":
        return JsonResponse(get_fn(request.user, pk))
    if request.method in ("PUT", "PATCH") and update_fn is not None:
        # both verbs update only the fields sent
        payload = validated(form_class, _json_body(request), partial=True)
        return JsonResponse(update_fn(request.user, pk, payload))
    if request.method == "DELETE":
        delete_fn(request.user, pk)
        return JsonResponse({"message": f"{label} deleted successfully"})
    allowed = ["GET", "DELETE"] + (["PUT", "PATCH"] if update_fn else [])
    return HttpResponseNotAllowed(allowed)


@csrf_exempt
@login_required_json
def customer_list(request):
    return _collection(request, lifecycle.list_customers,
                       lifecycle.create_customer, CustomerForm)


@csrf_exempt
@login_required_json
def customer_detail(request, pk):
    return _detail(request, pk, lifecycle.get_customer,
                   lifecycle.update_customer, lifecycle.delete_customer,
                   CustomerForm, "Customer")


@csrf_exempt
@login_required_json
def quote_list(request):
    return _collection(request, lifecycle.list_quotes,
                       lifecycle.create_quote, QuoteForm)


@csrf_exempt
@login_required_json
def quote_detail(request, pk):
    return _detail(request, pk, lifecycle.get_quote,
                   lifecycle.update_quote, lifecycle.delete_quote,
                   QuoteForm, "Quote")


@csrf_exempt
@login_required_json
def invoice_list(request):
    return _collection(request, lifecycle.list_invoices,
                       lifecycle.create_invoice, InvoiceForm)


@csrf_exempt
@login_required_json
def invoice_detail(request, pk):
    return _detail(request, pk, lifecycle.get_invoice,
                   lifecycle.update_invoice, lifecycle.delete_invoice,
                   InvoiceForm, "Invoice")


@csrf_exempt
@login_required_json
def payment_list(request):
    return _collection(request, lifecycle.list_payments,
                       lifecycle.create_payment, PaymentForm)


@csrf_exempt
@login_required_json
def payment_detail(request, pk):
    # payments are immutable: no update verb
    return _detail(request, pk, lifecycle.get_payment, None,
                   lifecycle.delete_payment, PaymentForm, "Payment")


@require_GET
@login_required_json
def dashboard_view(request):
    return JsonResponse(lifecycle.dashboard_summary(request.user))
