"""Configuration file schema for SecretSync."""

DURATION_PATTERN = r"^[+-]?(0|(([0-9]+(\.[0-9]*)?|\.[0-9]+)(ns|us|µs|μs|ms|s|m|h|d))+)$"

MAINTENANCE_WINDOW_SCHEMA = {
    "type": "object",
    "properties": {
        "name": {
            "type": "string",
            "description": "Optional window name used in error messages"
        },
        "days": {
            "type": "array",
            "items": {"type": "string"}
        },
        "startTime": {
            "type": "string",
            "description": "Window start in HH:MM, inclusive"
        },
        "endTime": {
            "type": "string",
            "description": "Window end in HH:MM, exclusive"
        },
        "timezone": {
            "type": "string",
            "description": "IANA timezone name"
        }
    },
    "required": ["days", "startTime", "endTime", "timezone"],
    "additionalProperties": False
}

OPERATOR_CONFIG_SCHEMA = {
    "type": "object",
    "properties": {
        "defaults": {
            "type": "object",
            "properties": {
                "type": {
                    "type": "string",
                    "enum": ["string", "bytes", "rsa", "ecdsa", "ed25519"]
                },
                "length": {
                    "type": "integer",
                    "minimum": 1
                },
                "curve": {
                    "type": "string",
                    "enum": ["P-256", "P-384", "P-521"]
                },
                "rsaBits": {
                    "type": "integer",
                    "minimum": 1024
                },
                "string": {
                    "type": "object",
                    "properties": {
                        "uppercase": {"type": "boolean"},
                        "lowercase": {"type": "boolean"},
                        "numbers": {"type": "boolean"},
                        "specialChars": {"type": "boolean"},
                        "allowedSpecialChars": {"type": "string"}
                    },
                    "additionalProperties": False
                }
            },
            "additionalProperties": False
        },
        "rotation": {
            "type": "object",
            "properties": {
                "minInterval": {
                    "type": "string",
                    "pattern": DURATION_PATTERN
                },
                "createEvents": {
                    "type": "boolean"
                }
            },
            "additionalProperties": False
        },
        "maintenanceWindows": {
            "type": "object",
            "properties": {
                "enabled": {
                    "type": "boolean"
                },
                "windows": {
                    "type": "array",
                    "items": MAINTENANCE_WINDOW_SCHEMA
                }
            },
            "additionalProperties": False
        }
    },
    "additionalProperties": False
}
