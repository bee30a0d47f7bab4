"""Domain enumerations for the workflow orchestrator.

Enums represent fixed sets of domain values (workflow lifecycle, error
policy, template set versions and precedence sources).
"""

from enum import Enum


class _ValuesMixin:
    """Mixin that adds a values() classmethod to str Enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings."""
        return [member.value for member in cls]


class WorkflowStatus(_ValuesMixin, str, Enum):
    """Workflow lifecycle status.

    New and duplicated workflows start as DRAFT; only ACTIVE workflows are
    returned by trigger lookups. ARCHIVED is the soft-delete state.
    """

    DRAFT = "draft"
    ACTIVE = "active"
    ARCHIVED = "archived"


class ErrorHandling(_ValuesMixin, str, Enum):
    """Workflow-level failure policy.

    ROLLBACK stops the sequence at the first failed behavior; CONTINUE and
    NOTIFY keep going. No compensating rollback of earlier side effects is
    performed.
    """

    ROLLBACK = "rollback"
    CONTINUE = "continue"
    NOTIFY = "notify"


class TemplateSetVersion(_ValuesMixin, str, Enum):
    """Template set schema version (1.0 = three legacy slots, 2.0 = flexible list)."""

    V1 = "1.0"
    V2 = "2.0"


class TemplateSetSource(_ValuesMixin, str, Enum):
    """Precedence level that produced a resolved template set (highest first)."""

    MANUAL = "manual"
    PRODUCT = "product"
    CHECKOUT = "checkout"
    DOMAIN = "domain"
    ORGANIZATION = "organization"
    SYSTEM = "system"


class BehaviorType(_ValuesMixin, str, Enum):
    """Behavior types the engine executes server-side.

    Closed set: each member maps to one injected action. Wire values are the
    kebab-case identifiers stored in workflow documents.
    """

    VALIDATE_REGISTRATION = "validate-registration"
    DETECT_EMPLOYER_BILLING = "detect-employer-billing"
    CREATE_CONTACT = "create-contact"
    CREATE_TICKET = "create-ticket"
    CREATE_TRANSACTION = "create-transaction"
    GENERATE_INVOICE = "generate-invoice"
    SEND_CONFIRMATION_EMAIL = "send-confirmation-email"
    CHECK_EVENT_CAPACITY = "check-event-capacity"
    CALCULATE_PRICING = "calculate-pricing"
    CREATE_FORM_RESPONSE = "create-form-response"
    UPDATE_STATISTICS = "update-statistics"
    SEND_ADMIN_NOTIFICATION = "send-admin-notification"
    CONSOLIDATED_INVOICE_GENERATION = "consolidated-invoice-generation"


class ClientSideBehaviorType(_ValuesMixin, str, Enum):
    """Behavior types recognized by the engine but run inline by the checkout flow."""

    EMPLOYER_DETECTION = "employer-detection"
    INVOICE_MAPPING = "invoice-mapping"
    FORM_LINKING = "form-linking"
    ADDON_CALCULATION = "addon-calculation"
    PAYMENT_PROVIDER_SELECTION = "payment-provider-selection"
    STRIPE_PAYMENT = "stripe-payment"
    INVOICE_PAYMENT = "invoice-payment"
    TAX_CALCULATION = "tax-calculation"


class PaymentTerms(_ValuesMixin, str, Enum):
    """Invoice payment terms accepted by billing behaviors."""

    NET30 = "net30"
    NET60 = "net60"
    NET90 = "net90"
