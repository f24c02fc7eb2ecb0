"""Sample generation request served to API and CLI users as a starting point."""
from typing import Any, Dict


def _prop(name: str, type_: str, **flags: Any) -> Dict[str, Any]:
    return {"name": name, "type": type_, **flags}


def sample_request() -> Dict[str, Any]:
    """A two-entity request in the camelCase wire format."""
    return {
        "config": {
            "outputPath": "./Generated",
            "rootNamespace": "MyApp",
            "generateDomain": True,
            "generateApplication": True,
            "generateInfrastructure": True,
            "generateApi": True,
            "useMediator": True,
            "useFluentValidation": True,
            "useAutoMapper": True,
            "database": {"provider": "SqlServer"},
        },
        "entities": [
            {
                "name": "Product",
                "hasAuditFields": True,
                "hasSoftDelete": True,
                "properties": [
                    _prop("Id", "int", isKey=True, isRequired=True),
                    _prop("Name", "string", isRequired=True, maxLength=200),
                    _prop("Description", "string", isNullable=True, maxLength=1000),
                    _prop("Price", "decimal", isRequired=True),
                    _prop("Stock", "int", isRequired=True),
                ],
            },
            {
                "name": "Customer",
                "hasAuditFields": True,
                "hasSoftDelete": True,
                "properties": [
                    _prop("Id", "int", isKey=True, isRequired=True),
                    _prop("FirstName", "string", isRequired=True, maxLength=100),
                    _prop("LastName", "string", isRequired=True, maxLength=100),
                    _prop("Email", "string", isRequired=True, maxLength=255),
                    _prop("Phone", "string", isNullable=True, maxLength=20),
                ],
            },
        ],
    }
