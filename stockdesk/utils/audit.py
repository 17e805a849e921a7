import logging

audit_logger = logging.getLogger("stockdesk.audit")


def write_log(*, user_id, action, resource, status="SUCCESS", ip=None, meta=None):
    level = logging.INFO if status == "SUCCESS" else logging.WARNING
    audit_logger.log(
        level,
        "%s %s %s",
        action,
        resource,
        status,
        extra={"user_id": user_id, "ip": ip, "meta": meta or {}},
    )
