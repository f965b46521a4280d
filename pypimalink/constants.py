DEFAULT_TIMEOUT = 20
DEFAULT_POLL_INTERVAL = 5  # seconds between notification polls

# ========== HOST ==========
PIMALINK_HOST = "application.pimalink.com"
PIMALINK_PORT = 443
BASE_URL = f"https://{PIMALINK_HOST}:{PIMALINK_PORT}"

# Hosts whose certificate is not verified (the cloud endpoint does not
# present a chain that validates against the system store)
UNVERIFIED_TLS_HOSTS = frozenset({PIMALINK_HOST})

# ========== WEB USER ENDPOINTS ==========
WEBUSER_SET_DETAILS = "/api/WebUser/SetWebUserDetails"  # 204 on success
WEBUSER_CONFIG = "/api/WebUser/Config/{lang}"
WEBUSER_PAIR = "/api/WebUser/Pair"  # 204 on success
WEBUSER_UNPAIR = "/api/WebUser/UnPair"  # 204 on success
WEBUSER_PAIR_ENTITIES = "/api/WebUser/GetPairEntities"
WEBUSER_NOTIFICATIONS = "/api/WebUser/GetNotifications"

# ========== PANEL ENDPOINTS ==========
PANEL_AUTHENTICATE = "/api/Panel/Authenticate"  # 200 + sessionToken
PANEL_SET_GENERAL_STATUS = "/api/Panel/SetGeneralStatus"  # 200 on success
PANEL_DISCONNECT = "/api/Panel/Disconnect"

# ========== ENVELOPE ==========
OS_TYPE = "2"
HDR_OS_TYPE = "oSType"
HDR_WEB_USER_ID = "webUserId"
HDR_PAIR_ENTITY_ID = "pairEntityId"
HDR_SESSION_TOKEN = "sessionToken"

# ========== STATUS CODES ==========
HTTP_200_OK = 200
HTTP_204_NO_CONTENT = 204

# ========== AUTHENTICATE ERROR CODES ==========
ERROR_CODE_PANEL_IN_SESSION = 21  # panel already in a session elsewhere
ERROR_CODE_PANEL_BUSY = 24
ERROR_CODE_INVALID_USER_CODE = 45

# ========== ERROR TEXTS ==========
# The service spells these "ActionFaild-..."; both spellings are accepted
ERROR_TEXT_INVALID_WEB_USER_ID = (
    "ActionFailed-InvalidWebUserID",
    "ActionFaild-InvalidWebUserID",
)
ERROR_TEXT_PAIRING_ALREADY_EXIST = (
    "ActionFailed-PairingAlreadyExist",
    "ActionFaild-PairingAlreadyExist",
)

# ========== GENERAL STATUS ==========
# Numeric codes sent as data of SetGeneralStatus
GENERAL_STATUS_CODES = {
    "disarmed": 0,
    "armed": 1,
    "partially_armed": 2,
}

# ========== PAIRING ==========
DEFAULT_WEB_USER_NAME = "pypimalink"
DEFAULT_CONFIG_LANG = "en"
UNPAIR_DEVICE_NAME = "unpair"  # deleting a device with this name unpairs it

# ========== SETTINGS KEYS ==========
SETTING_WEB_USER_ID = "pimalink.webUserID"
SETTING_USER_EMAIL = "pimalink.userEmail"
SETTING_USER_PHONE = "pimalink.userPhone"

# ========== DEVICE SETTINGS ==========
DEVICE_SETTING_USER_CODE = "userCode"
