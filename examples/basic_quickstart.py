from restrbac import Guard


def main() -> None:
    roles = {
        "accountant": [
            {"action": ["list", "show"], "resource": "posts"},
            {"type": "deny", "action": "read", "resource": "posts.views"},
        ],
    }
    g = Guard(roles)
    print(g.is_allowed("accountant", "list", "posts"))  # True
    print(g.is_allowed("accountant", "read", "posts.views"))  # False, explicit deny
    d = g.authorize_request("accountant", "DELETE", "/posts/42")
    print(d.allowed, d.reason)  # False no_match


if __name__ == "__main__":
    main()
