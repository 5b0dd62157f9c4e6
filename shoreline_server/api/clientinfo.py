from fastapi import Request


def get_real_ip(request: Request) -> str:
    if request.client is None:
        return "0.0.0.0"
    xff = request.headers.get("x-forwarded-for", request.client.host)
    return xff.split(",")[0].strip()
