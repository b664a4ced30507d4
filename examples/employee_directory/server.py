# -*- coding: utf-8 -*-
"""
Employee directory served from manifest.json.

Run over stdio:      python examples/employee_directory/server.py
Or via the CLI:      manifest-mcp --manifest examples/employee_directory/manifest.json \
                         --handlers examples/employee_directory/server.py:handlers
"""

import logging
import os
import sys
from dataclasses import asdict

from data import Employee, employees

from manifest_mcp import HandlerTable, ManifestPlugin, StartupError
from manifest_mcp.logging_setup import setup_logging

logger = logging.getLogger("employee_directory")

MANIFEST_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), "manifest.json")

handlers = HandlerTable()


# -----------------------------------------------------------------------------
# Business logic, mapped exactly to manifest names/URIs
# -----------------------------------------------------------------------------
@handlers.tool("get_employee")
def get_employee(args):
    for emp in employees:
        if emp.id == args["id"]:
            return emp
    raise LookupError(f"Employee with ID {args['id']} not found")


@handlers.tool("add_employee")
def add_employee(args):
    new_id = str(len(employees) + 1)
    employees.append(
        Employee(new_id, args["name"], args["role"], args["department"], args["email"])
    )
    logger.info(f"Added employee {new_id}")
    return {"success": True, "id": new_id, "message": "Created"}


@handlers.resource("employee://all")
def all_employees(_args):
    return [asdict(emp) for emp in employees]


@handlers.prompt("summarize_team")
def summarize_team(args):
    dept = args.get("department") or "Engineering"
    team = [emp.name for emp in employees if emp.department.lower() == dept.lower()]
    return f"Analyze this team: {', '.join(team)}"


# -----------------------------------------------------------------------------
# Entrypoint
# -----------------------------------------------------------------------------
if __name__ == "__main__":
    setup_logging(os.getenv("MCP_LOG_LEVEL", "INFO"))
    try:
        plugin = ManifestPlugin(MANIFEST_PATH, handlers, name="employee-directory", version="1.0.0")
    except StartupError as e:
        logger.critical(f"Critical Server Error: {e}")
        sys.exit(e.exit_code)
    plugin.start()
