#!/usr/bin/env python3
"""Fetch the Porkbun key pair and build the auth payload for its JSON API."""

import json
import sys

from openvault import CredentialNotFound, Vault


def main():
    """Pre-flight the Porkbun credentials, then print the request body."""
    vault = Vault()

    validation = vault.validate_service("porkbun")
    if not validation.valid:
        print(f"Missing credentials: {', '.join(validation.missing)}", file=sys.stderr)
        print("Run 'openvault validate porkbun' for setup steps.", file=sys.stderr)
        sys.exit(1)

    try:
        credentials = vault.get_service_credentials("porkbun")
    except CredentialNotFound as e:
        print(e, file=sys.stderr)
        sys.exit(1)

    payload = {
        "apikey": credentials["PORKBUN_API_KEY"],
        "secretapikey": credentials["PORKBUN_SECRET_KEY"],
    }
    print(json.dumps(payload))


if __name__ == "__main__":
    main()
