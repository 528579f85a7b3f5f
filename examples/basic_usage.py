"""Demo dashboard example using the built-in DI container."""

from domain_analytics.core.container import DIContainer
from domain_analytics.utils.formatting import format_change, format_number


def main() -> None:
    dashboard = DIContainer.create_demo_dashboard(seed=42)
    dashboard.refresh("7d")

    state = dashboard.default_state().with_updates(
        date_range="7d", selected_tags={"casino", "saas"}
    )
    view = dashboard.view(state)

    print("Domains:", view.totals.domain_count)
    print("Pageviews:", format_number(view.totals.pageviews))
    print("Bounce rate:", f"{view.totals.bounce_rate}%")
    for domain in view.favorites + view.regular:
        marker = "*" if domain.favorite else " "
        print(
            marker,
            domain.name,
            format_number(domain.visitors.current),
            format_change(domain.visitors.change),
        )

    print()
    print(dashboard.export_filename(state))
    print(dashboard.export_csv(state))


if __name__ == "__main__":
    main()
