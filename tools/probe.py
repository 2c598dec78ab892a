import sys
import time
from urllib import error, request

HEADER = "X-CSRF-Token"

def get_token(base: str) -> str:
    with request.urlopen(f"{base}/csrf-token") as resp:
        return resp.read().decode("utf-8")

def post_process(base: str, token: str):
    req = request.Request(f"{base}/process", data=b"", method="POST", headers={HEADER: token})
    try:
        with request.urlopen(req) as resp:
            return resp.status, resp.read().decode("utf-8")
    except error.HTTPError as e:
        return e.code, e.read().decode("utf-8")

def main(base: str = "http://127.0.0.1:3000", wait: float = 31.0):
    token = get_token(base)
    print("token:", token)
    print("immediate:", post_process(base, token))
    print("unknown:", post_process(base, "does-not-exist"))
    print(f"waiting {wait:.0f}s ...")
    time.sleep(wait)
    # 401 if the sweep has not run yet, 403 once it has
    print("after wait:", post_process(base, token))

if __name__ == "__main__":
    base = sys.argv[1] if len(sys.argv) > 1 else "http://127.0.0.1:3000"
    wait = float(sys.argv[2]) if len(sys.argv) > 2 else 31.0
    main(base, wait)
