#!/usr/bin/env python3
"""
Attendance Check-in Kiosk

Command-line front end for the selfie check-in workflow.

Usage:
    python checkin.py [command] [options]

Commands:
    login       Log in with a demo account
    register    Validate a sign-up form (demo only, nothing is stored)
    logout      Clear the stored session
    whoami      Show the stored session
    checkin     Capture a selfie and submit attendance
    dashboard   Show attendance statistics (admin only)
    serve       Run the submission gateway
"""

import argparse
import asyncio
import getpass
import logging
import platform
import sys

from camera import OpenCVMediaDevices
from capture_controller import CaptureController, CaptureState
from config import Config
from dashboard_stats import build_dashboard_stats, format_dashboard, render_department_chart
from device_capabilities import DeviceCapabilityAcquirer
from errors import GatewayError, RemoteError
from gateway_client import GatewayClient
from geolocation import create_provider
from models.attendance import DEPARTMENTS
from models.session import UserSession
from utils.auth_decorators import admin_required, get_session_repository, login_required
from utils.validation import (
    get_role_permissions,
    validate_credentials,
    validate_login_form,
    validate_signup_form,
)

_PLATFORM_TOKENS = {
    'Windows': 'Windows NT',
    'Darwin': 'Macintosh',
    'Linux': 'X11; Linux',
}

KIOSK_USER_AGENT = (
    f"AttendanceKiosk/1.0 ({_PLATFORM_TOKENS.get(platform.system(), platform.system())}; "
    f"{platform.machine()}) Python/{platform.python_version()}"
)


def _print_errors(errors):
    for field, message in errors.items():
        print(f"   ❌ {field}: {message}")


# ----------------------------------------Account commands--------------------------------------------

def cmd_login(args, config):
    email = args.email or input("Email: ").strip()
    password = args.password or getpass.getpass("Password: ")

    errors = validate_login_form(email, password)
    if errors:
        print("❌ Please fix the errors in the form")
        _print_errors(errors)
        return 1

    role = validate_credentials(email, password)
    if not role:
        print("❌ Invalid credentials! Try:")
        print("   User: user@demo.com / user1234")
        print("   Admin: admin@demo.com / admin1234")
        return 1

    session = UserSession.start(role, email)
    get_session_repository(config).save(session)
    print(f"✅ Logged in as {email} ({role})")
    return 0


def cmd_register(args, config):
    name = args.name or input("Name: ").strip()
    email = args.email or input("Email: ").strip()
    password = args.password or getpass.getpass("Password: ")
    confirm_password = args.confirm_password or getpass.getpass("Confirm password: ")

    errors = validate_signup_form(name, email, password, confirm_password)
    if errors:
        print("❌ Please fix the errors in the form")
        _print_errors(errors)
        return 1

    print("✅ Account created successfully! You can now login.")
    return 0


def cmd_logout(args, config):
    get_session_repository(config).clear()
    print("👋 Logged out")
    return 0


def cmd_whoami(args, config):
    session = get_session_repository(config).load()
    if session is None:
        print("Not logged in")
        return 1
    print(f"👤 {session.email} ({session.role}) since {session.login_time}")
    permissions = get_role_permissions(session.role)
    print(f"   {permissions['title']}:")
    for permission in permissions['permissions']:
        print(f"   ✅ {permission}")
    for restriction in permissions['restrictions']:
        print(f"   ⛔ {restriction}")
    return 0


# ----------------------------------------Check-in workflow--------------------------------------------

def build_controller(config):
    acquirer = DeviceCapabilityAcquirer(
        config,
        geolocation_provider=create_provider(config),
        user_agent=KIOSK_USER_AGENT
    )
    return CaptureController(
        acquirer,
        OpenCVMediaDevices(config.CAMERA_INDEX),
        GatewayClient(config.GATEWAY_URL, timeout=config.SUBMISSION_TIMEOUT),
        width=config.CAPTURE_WIDTH,
        height=config.CAPTURE_HEIGHT,
        jpeg_quality=config.JPEG_QUALITY
    )


async def _ask(prompt):
    return (await asyncio.to_thread(input, prompt)).strip()


def _print_status(controller):
    print(f"\n👤 User ID: {controller.user_id}")
    print(f"🏢 Department: {controller.department or 'not selected'}")
    print(f"🌐 IP Address: {controller.ip_address or 'Loading...'}")
    print(f"💻 Device: {controller.acquirer.describe_device()}")
    if controller.location_loading:
        print("📍 Getting location...")
    elif controller.location_info:
        location = controller.location_info
        print(f"📍 Address: {location.address or 'Resolving...'}")
        print(f"   Coordinates: {location.coordinates_display}")
        print(f"   Accuracy: ±{round(location.accuracy)}m ({location.location_accuracy_level})")
    if controller.location_error:
        print(f"⚠️ Location Error: {controller.location_error}")
    if controller.upload_error:
        print(f"❌ Error: {controller.upload_error}")


async def _choose_department(controller, preset=None):
    if preset and controller.select_department(preset):
        return
    print("\n🏢 Select Department:")
    for index, name in enumerate(DEPARTMENTS, start=1):
        print(f"   {index}. {name}")
    answer = await _ask("Department (number or name, blank to skip): ")
    if answer.isdigit() and 1 <= int(answer) <= len(DEPARTMENTS):
        answer = DEPARTMENTS[int(answer) - 1]
    controller.select_department(answer)


async def run_checkin(controller, department=None, auto=False):
    """Drive the controller until the user quits or a check-in succeeds"""
    controller.mount()
    try:
        while True:
            _print_status(controller)

            if controller.state == CaptureState.IDLE:
                if not auto:
                    answer = await _ask("\n📷 Press Enter to start the camera (q to quit): ")
                    if answer.lower() == 'q':
                        return 1
                print("🔄 Starting camera...")
                if not await controller.start_camera():
                    if auto:
                        return 1
                    continue

            if controller.state == CaptureState.STREAMING:
                if not auto:
                    answer = await _ask("📸 Press Enter to capture (c to cancel): ")
                    if answer.lower() == 'c':
                        controller.stop_camera()
                        continue
                if not controller.capture_image():
                    if auto:
                        return 1
                    continue
                print("✅ Photo captured")

            if controller.state == CaptureState.CAPTURED:
                if not controller.department:
                    await _choose_department(controller, department)

                if not auto:
                    answer = await _ask(
                        "\n[s] Take Attendance  [r] Retake Photo  [l] Retry Location  [q] Quit: "
                    )
                    answer = answer.lower() or 's'
                    if answer == 'q':
                        return 1
                    if answer == 'r':
                        await controller.retake()
                        continue
                    if answer == 'l':
                        await controller.request_location()
                        continue

                print("🚀 Submitting attendance...")
                if await controller.submit():
                    print("✅ Attendance Submitted Successfully! Your attendance has been recorded.")
                    return 0
                if auto:
                    _print_status(controller)
                    return 1
    finally:
        controller.teardown()


@login_required
def cmd_checkin(args, config, session):
    print(f"👋 Welcome, {'Admin' if session.is_admin else session.email}")
    controller = build_controller(config)
    if args.user_id:
        controller.user_id = args.user_id
    return asyncio.run(run_checkin(controller, department=args.department, auto=args.auto))


# ----------------------------------------Dashboard--------------------------------------------

@admin_required
def cmd_dashboard(args, config, session):
    client = GatewayClient(config.GATEWAY_URL, timeout=config.SUBMISSION_TIMEOUT)
    print("🔄 Loading attendance data...")
    try:
        response = asyncio.run(client.list_records())
    except GatewayError as e:
        message = (e.body_message if isinstance(e, RemoteError) else None) or e.message
        print(f"❌ Failed to fetch attendance data: {message}")
        return 1

    body = response.body if isinstance(response.body, dict) else {}
    if not body.get('success'):
        print("❌ No attendance data available")
        return 1

    stats = build_dashboard_stats(body.get('data'))
    print(format_dashboard(stats))

    if args.chart:
        with open(args.chart, 'wb') as f:
            f.write(render_department_chart(stats['departments']))
        print(f"\n📊 Department chart saved to {args.chart}")
    return 0


def cmd_serve(args, config):
    from app import create_app

    app = create_app(config)
    app.logger_handler.logger.info("Attendance gateway started")
    app.run(debug=app.config['DEBUG'],
            host=args.host or app.config['FLASK_HOST'],
            port=args.port or app.config['FLASK_PORT'])
    return 0


def build_parser():
    parser = argparse.ArgumentParser(description='Attendance Check-in Kiosk')
    parser.add_argument('--verbose', action='store_true', help='Show debug logging')
    subparsers = parser.add_subparsers(dest='command', required=True)

    login = subparsers.add_parser('login', help='Log in with a demo account')
    login.add_argument('--email')
    login.add_argument('--password')
    login.set_defaults(func=cmd_login)

    register = subparsers.add_parser('register', help='Validate a sign-up form')
    register.add_argument('--name')
    register.add_argument('--email')
    register.add_argument('--password')
    register.add_argument('--confirm-password')
    register.set_defaults(func=cmd_register)

    logout = subparsers.add_parser('logout', help='Clear the stored session')
    logout.set_defaults(func=cmd_logout)

    whoami = subparsers.add_parser('whoami', help='Show the stored session')
    whoami.set_defaults(func=cmd_whoami)

    checkin = subparsers.add_parser('checkin', help='Capture a selfie and submit attendance')
    checkin.add_argument('--department', help=f"One of: {', '.join(DEPARTMENTS)}")
    checkin.add_argument('--user-id', help='Override the generated user id')
    checkin.add_argument('--auto', action='store_true',
                         help='Capture and submit without prompts')
    checkin.set_defaults(func=cmd_checkin)

    dashboard = subparsers.add_parser('dashboard', help='Show attendance statistics')
    dashboard.add_argument('--chart', help='Write the department pie chart PNG to this path')
    dashboard.set_defaults(func=cmd_dashboard)

    serve = subparsers.add_parser('serve', help='Run the submission gateway')
    serve.add_argument('--host')
    serve.add_argument('--port', type=int)
    serve.set_defaults(func=cmd_serve)

    return parser


def main(argv=None, config=Config):
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s %(levelname)s %(name)s %(message)s'
    )
    return args.func(args, config)


if __name__ == '__main__':
    sys.exit(main())
