from aiohttp import BasicAuth
from aiohttp_socks import ProxyConnector
import re

SCHEMES = ["http://", "https://", "socks4://", "socks5://"]

def check_proxy_schemes(proxy):
    if any(proxy.startswith(scheme) for scheme in SCHEMES):
        return proxy
    return f"http://{proxy}"

def build_proxy_config(proxy=None):
    """Return (connector, proxy_url, proxy_auth) for an aiohttp ClientSession."""
    if not proxy:
        return None, None, None

    proxy = check_proxy_schemes(proxy)

    if proxy.startswith("socks"):
        connector = ProxyConnector.from_url(proxy)
        return connector, None, None

    elif proxy.startswith("http"):
        match = re.match(r"https?://(.*?):(.*?)@(.*)", proxy)
        if match:
            username, password, host_port = match.groups()
            scheme = proxy.split("://", 1)[0]
            clean_url = f"{scheme}://{host_port}"
            auth = BasicAuth(username, password)
            return None, clean_url, auth
        else:
            return None, proxy, None

    raise ValueError("Unsupported Proxy Type.")

def build_request_kwargs(proxy=None, timeout=60):
    """requests-style kwargs for web3's HTTPProvider."""
    request_kwargs = {"timeout": timeout}
    if proxy:
        proxy = check_proxy_schemes(proxy)
        request_kwargs["proxies"] = {"http": proxy, "https": proxy}
    return request_kwargs
