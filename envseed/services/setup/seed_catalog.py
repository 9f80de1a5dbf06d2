"""Static seed catalogs.

Declarative tables consumed by the environment seed flow. Each table maps a stable
platform ID to the attributes saved under it, so re-running the seed upserts the same
records. Nothing here makes remote calls.
"""
from __future__ import annotations

from typing import Any

# ---------------------------------------------------------------------------
# Bootstrap users
# ---------------------------------------------------------------------------

MIDDLEWARE_USER_ID: str = "MiddlewareIntegrationsUser"
MIDDLEWARE_USERNAME: str = "Default_Admin"
INITIAL_ADMIN_USER_ID: str = "InitialAdminUser"
BOOTSTRAP_USER_EMAIL: str = "test@test.com"

# ---------------------------------------------------------------------------
# Well-known API clients (natural key = AppName)
# ---------------------------------------------------------------------------

SELLER_API_CLIENT_NAME: str = "Default HeadStart Admin UI"
BUYER_API_CLIENT_NAME: str = "Default HeadStart Buyer UI"
# Points checkout integration events at a developer tunnel.
BUYER_LOCAL_API_CLIENT_NAME: str = "Default HeadStart Buyer UI LOCAL"
MIDDLEWARE_API_CLIENT_NAME: str = "Middleware Integrations"
STOREFRONT_API_CLIENT_FILTER: str = "Storefront - *"

API_CLIENTS: dict[str, dict[str, Any]] = {
    MIDDLEWARE_API_CLIENT_NAME: {
        "allow_any_buyer": False,
        "allow_any_supplier": False,
        "allow_seller": True,
        "default_context_user_name": MIDDLEWARE_USERNAME,
    },
    SELLER_API_CLIENT_NAME: {"allow_any_buyer": False, "allow_any_supplier": True, "allow_seller": True},
    BUYER_API_CLIENT_NAME: {"allow_any_buyer": True, "allow_any_supplier": False, "allow_seller": False},
    BUYER_LOCAL_API_CLIENT_NAME: {"allow_any_buyer": True, "allow_any_supplier": False, "allow_seller": False},
}

ACCESS_TOKEN_DURATION_MINUTES: int = 600
REFRESH_TOKEN_DURATION_MINUTES: int = 43200
CLIENT_SECRET_LENGTH: int = 60
# Clients that authenticate server-side and get a freshly generated secret on every seed.
API_CLIENTS_WITH_SECRET: tuple[str, ...] = (MIDDLEWARE_API_CLIENT_NAME,)

# ---------------------------------------------------------------------------
# Security profiles (ID == Name == custom role label)
# ---------------------------------------------------------------------------

FULL_ACCESS_SECURITY_PROFILE: str = "DefaultContext"
FULL_ACCESS_ROLE: str = "FullAccess"
BASE_BUYER_ROLE: str = "HSBaseBuyer"

SECURITY_PROFILES: dict[str, dict[str, list[str]]] = {
    # seller / supplier
    "HSBuyerAdmin": {
        "custom_roles": ["HSBuyerAdmin"],
        "roles": ["AddressAdmin", "ApprovalRuleAdmin", "BuyerAdmin", "BuyerUserAdmin", "CreditCardAdmin", "UserGroupAdmin"],
    },
    "HSBuyerImpersonator": {"custom_roles": ["HSBuyerImpersonator"], "roles": ["BuyerImpersonation"]},
    "HSCategoryAdmin": {"custom_roles": ["HSCategoryAdmin"], "roles": ["CategoryAdmin"]},
    "HSContentAdmin": {"custom_roles": ["AssetAdmin", "DocumentAdmin", "SchemaAdmin"], "roles": ["ApiClientAdmin"]},
    "HSMeAdmin": {"custom_roles": ["HSMeAdmin"], "roles": ["MeAdmin", "MeXpAdmin"]},
    "HSMeProductAdmin": {
        "custom_roles": ["HSMeProductAdmin"],
        "roles": ["InventoryAdmin", "PriceScheduleAdmin", "ProductAdmin", "ProductFacetReader", "SupplierAddressReader"],
    },
    "HSMeSupplierAddressAdmin": {
        "custom_roles": ["HSMeSupplierAddressAdmin"],
        "roles": ["SupplierAddressAdmin", "SupplierReader"],
    },
    "HSMeSupplierAdmin": {"custom_roles": ["AssetAdmin", "HSMeSupplierAdmin"], "roles": ["SupplierAdmin", "SupplierReader"]},
    "HSMeSupplierUserAdmin": {"custom_roles": ["HSMeSupplierUserAdmin"], "roles": ["SupplierReader", "SupplierUserAdmin"]},
    "HSOrderAdmin": {"custom_roles": ["HSOrderAdmin"], "roles": ["AddressReader", "OrderAdmin", "ShipmentReader"]},
    "HSProductAdmin": {
        "custom_roles": ["HSProductAdmin"],
        "roles": [
            "AdminAddressReader",
            "CatalogAdmin",
            "PriceScheduleAdmin",
            "ProductAdmin",
            "ProductAssignmentAdmin",
            "ProductFacetAdmin",
            "SupplierAddressReader",
        ],
    },
    "HSPromotionAdmin": {"custom_roles": ["HSPromotionAdmin"], "roles": ["PromotionAdmin"]},
    "HSReportAdmin": {"custom_roles": ["HSReportAdmin"], "roles": []},
    "HSReportReader": {"custom_roles": ["HSReportReader"], "roles": []},
    "HSSellerAdmin": {"custom_roles": ["HSSellerAdmin"], "roles": ["AdminUserAdmin"]},
    "HSShipmentAdmin": {"custom_roles": ["HSShipmentAdmin"], "roles": ["AddressReader", "OrderReader", "ShipmentAdmin"]},
    "HSStorefrontAdmin": {"custom_roles": ["HSStorefrontAdmin"], "roles": ["ProductFacetAdmin", "ProductFacetReader"]},
    "HSSupplierAdmin": {
        "custom_roles": ["HSSupplierAdmin"],
        "roles": ["SupplierAddressAdmin", "SupplierAdmin", "SupplierUserAdmin"],
    },
    "HSSupplierUserGroupAdmin": {
        "custom_roles": ["HSSupplierUserGroupAdmin"],
        "roles": ["SupplierReader", "SupplierUserGroupAdmin"],
    },
    # buyer: the only profile a buyer user needs to check out
    BASE_BUYER_ROLE: {
        "custom_roles": [BASE_BUYER_ROLE],
        "roles": [
            "MeAddressAdmin",
            "MeAdmin",
            "MeCreditCardAdmin",
            "MeXpAdmin",
            "ProductFacetReader",
            "Shopper",
            "SupplierAddressReader",
            "SupplierReader",
        ],
    },
    # Location roles carry no platform roles; they are assigned to location user groups so
    # a user's token shows whether they administer at least one location.
    "HSLocationOrderApprover": {"custom_roles": ["HSLocationOrderApprover"], "roles": []},
    "HSLocationViewAllOrders": {"custom_roles": ["HSLocationViewAllOrders"], "roles": []},
    "HSLocationAddressAdmin": {"custom_roles": ["HSLocationAddressAdmin"], "roles": []},
}

# Assigned at organization scope so every seller user inherits them.
SELLER_ROLES: tuple[str, ...] = (
    "HSBuyerAdmin",
    "HSBuyerImpersonator",
    "HSCategoryAdmin",
    "HSContentAdmin",
    "HSMeAdmin",
    "HSOrderAdmin",
    "HSProductAdmin",
    "HSPromotionAdmin",
    "HSReportAdmin",
    "HSReportReader",
    "HSSellerAdmin",
    "HSShipmentAdmin",
    "HSStorefrontAdmin",
    "HSSupplierAdmin",
    "HSSupplierUserGroupAdmin",
)

# ---------------------------------------------------------------------------
# Incrementors
# ---------------------------------------------------------------------------

ORDER_INCREMENTOR: str = "orderIncrementor"
SUPPLIER_INCREMENTOR: str = "supplierIncrementor"
BUYER_INCREMENTOR: str = "buyerIncrementor"

INCREMENTORS: dict[str, dict[str, Any]] = {
    ORDER_INCREMENTOR: {"name": "Order Incrementor", "last_number": 0, "left_padding_count": 6},
    SUPPLIER_INCREMENTOR: {"name": "Supplier Incrementor", "last_number": 0, "left_padding_count": 3},
    BUYER_INCREMENTOR: {"name": "Buyer Incrementor", "last_number": 0, "left_padding_count": 4},
}

# ---------------------------------------------------------------------------
# Message senders
# ---------------------------------------------------------------------------

BUYER_EMAILS_SENDER: str = "BuyerEmails"
SELLER_EMAILS_SENDER: str = "SellerEmails"
SUPPLIER_EMAILS_SENDER: str = "SupplierEmails"
MESSAGE_SENDER_URL_PATH: str = "/messagesenders/{messagetype}"

MESSAGE_SENDERS: dict[str, dict[str, Any]] = {
    BUYER_EMAILS_SENDER: {
        "name": "Buyer Emails",
        "scope": "buyer",
        # OrderSubmitted and ShipmentCreated are sent by the middleware itself.
        "message_types": [
            "ForgottenPassword",
            "NewUserInvitation",
            "OrderApproved",
            "OrderDeclined",
            "OrderSubmittedForApproval",
        ],
    },
    SELLER_EMAILS_SENDER: {"name": "Seller Emails", "scope": "organization", "message_types": ["ForgottenPassword"]},
    SUPPLIER_EMAILS_SENDER: {"name": "Supplier Emails", "scope": "supplier", "message_types": ["ForgottenPassword"]},
}

# ---------------------------------------------------------------------------
# Checkout integration events
# ---------------------------------------------------------------------------

CHECKOUT_EVENT_ID: str = "HeadStartCheckout"
CHECKOUT_LOCAL_EVENT_ID: str = "HeadStartCheckoutLOCAL"
CHECKOUT_EVENT_TYPE: str = "OrderCheckout"
CHECKOUT_CONFIG_DATA: dict[str, bool] = {
    "ExcludePOProductsFromShipping": False,
    "ExcludePOProductsFromTax": True,
}

# ---------------------------------------------------------------------------
# xp indices (ThingType, Key)
# ---------------------------------------------------------------------------

XP_INDICES: tuple[tuple[str, str], ...] = (
    ("UserGroup", "Type"),
    ("UserGroup", "Role"),
    ("UserGroup", "Country"),
    ("Company", "Data.ServiceCategory"),
    ("Company", "Data.VendorLevel"),
    ("Company", "SyncFreightPop"),
    ("Company", "CountriesServicing"),
    ("Order", "NeedsAttention"),
    ("Order", "StopShipSync"),
    ("Order", "OrderType"),
    ("Order", "LocationID"),
    ("Order", "SubmittedOrderStatus"),
    ("Order", "IsResubmitting"),
    ("Order", "SupplierIDs"),
    ("User", "UserGroupID"),
    ("User", "RequestInfoEmails"),
)

# ---------------------------------------------------------------------------
# Buyers / assets
# ---------------------------------------------------------------------------

DEFAULT_BUYER_NAME: str = "Default HeadStart Buyer"
TRANSLATIONS_BLOB_KEY: str = "i18n/en.json"

SEED_SUCCESS_COMMENTS: str = (
    "Success! Your environment is now seeded. The following clientIDs & secrets should be used to "
    "finalize the configuration of your application. The initial admin username and password can be "
    "used to sign into your admin application"
)
