# main.py

import logging

from harvest.config import Config, load_environment


def print_result(title, items, error, describe):
    if error:
        print(f"Failed to fetch {title}: {error}")
        return
    print(f"\n{title.capitalize()} ({len(items)}):")
    for item in items:
        print(f"- {describe(item)}")


def main():
    logging.basicConfig(level=logging.INFO)

    # Load environment variables
    load_environment()
    config = Config()
    try:
        config.validate()
    except ValueError as e:
        print(f"Configuration error: {e}")
        print("Please check your .env file.")
        return 1

    print(f"Connecting to {config.HARVEST_ACCOUNT_NAME}.harvestapp.com...")
    with config.create_controller() as harvest:
        users = harvest.get_users(
            lambda users, error: print_result("users", users, error, lambda u: f"{u.identifier}: {u.full_name} <{u.email}>")
        )
        projects = harvest.get_projects(
            lambda projects, error: print_result("projects", projects, error, lambda p: f"{p.identifier}: {p.name} (client {p.client_id})")
        )
        clients = harvest.clients.get_clients(
            lambda clients, error: print_result("clients", clients, error, lambda c: f"{c.identifier}: {c.name}{'' if c.active else ' (inactive)'}")
        )

        # Wait for every completion before the worker pool shuts down
        for future in (users, projects, clients):
            future.result()

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
