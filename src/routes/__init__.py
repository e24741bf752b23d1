from flask import request


def form_data() -> dict:
    """Submitted form fields, from either a JSON body or an HTML form."""
    payload = request.get_json(silent=True)
    if isinstance(payload, dict):
        return payload
    return request.form.to_dict()
