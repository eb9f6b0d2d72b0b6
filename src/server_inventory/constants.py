TOKEN_KEY = "auth_token"
USER_KEY = "user_data"
SESSION_TTL = 24 * 60 * 60
AUTHORIZATION_HEADER = "Authorization"

NUMERIC_FIELDS = {
    "cpu": int,
    "ram": int,
    "storage": int,
    "total_cost": float,
}

DEFAULT_DRAFT = {
    "project_name": "",
    "project_purpose": "",
    "environment": "",
    "vm_name": "",
    "cpu": 1,
    "ram": 1,
    "storage": 10,
    "total_cost": 0.0,
    "os_version": "",
    "ip": "",
    "hostname": "",
    "username": "",
    "password": "",
    "server_no": "",
    "created_by": "",
    "remarks": "",
}
