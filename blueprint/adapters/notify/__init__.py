from blueprint.adapters.notify.log_notifier import LogNotifier

__all__ = ["LogNotifier"]
