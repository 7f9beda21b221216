"""
Dashboard Statistics
====================

Aggregates for the admin dashboard, computed from the collection returned
by the remote storage API:
- total check-ins and check-ins today
- per-department counts (the pie chart)
- the most recent check-ins

The remote API wraps its items as {"data": {"Items": [...]}}; bare
{"Items": [...]} and plain lists are accepted too.
"""

import io
import math
from collections import Counter
from datetime import datetime

from PIL import Image, ImageDraw

from models.attendance import AttendanceRecord, parse_location

CHART_COLORS = ['#004e9c', '#0066cc', '#3399ff', '#66b3ff', '#99ccff']
RECENT_LIMIT = 6


def extract_records(payload):
    """Pull the list of record dicts out of a remote API payload"""
    if isinstance(payload, list):
        items = payload
    elif isinstance(payload, dict):
        inner = payload.get('data', payload)
        if isinstance(inner, list):
            items = inner
        elif isinstance(inner, dict):
            items = inner.get('Items') or []
        else:
            items = []
    else:
        items = []
    return [item for item in items if isinstance(item, dict)]


def parse_timestamp(value):
    """ISO-8601 string (with optional Z) to an aware datetime, or None"""
    if not value or not isinstance(value, str):
        return None
    try:
        return datetime.fromisoformat(value.replace('Z', '+00:00'))
    except ValueError:
        return None


def _local_date(timestamp):
    parsed = parse_timestamp(timestamp)
    if parsed is None:
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone()
    return parsed.date()


def department_counts(records):
    return dict(Counter(record.get('department') or 'unknown' for record in records))


def count_today(records, today=None):
    today = today or datetime.now().date()
    return sum(1 for record in records if _local_date(record.get('timestamp')) == today)


def recent_records(records, limit=RECENT_LIMIT):
    """Newest first; records with unparseable timestamps sort last"""
    def sort_key(record):
        parsed = parse_timestamp(record.get('timestamp'))
        return parsed.timestamp() if parsed else float('-inf')
    return sorted(records, key=sort_key, reverse=True)[:limit]


def summarize_record(record):
    """Dashboard row for one record, without the image payload"""
    latitude, longitude = parse_location(record.get('location'))
    return {
        'id': record.get('id'),
        'department': record.get('department'),
        'timestamp': record.get('timestamp'),
        'location_address': record.get('location_address'),
        'ip_address': record.get('ip_address'),
        'latitude': latitude,
        'longitude': longitude,
        'has_location': AttendanceRecord.from_payload(record).has_location_data,
    }


def build_dashboard_stats(payload, today=None):
    """
    Returns:
        dict: total, today, departments, department_count, recent
    """
    records = extract_records(payload)
    departments = department_counts(records)
    return {
        'total': len(records),
        'today': count_today(records, today),
        'departments': departments,
        'department_count': len(departments),
        'recent': [summarize_record(record) for record in recent_records(records)],
    }


def render_department_chart(departments, size=320):
    """
    Pie chart of the department distribution as PNG bytes.
    An empty distribution renders a grey placeholder disc.
    """
    img = Image.new('RGB', (size, size), 'white')
    draw = ImageDraw.Draw(img)
    box = (10, 10, size - 10, size - 10)

    total = sum(departments.values())
    if total == 0:
        draw.ellipse(box, fill='#e5e7eb')
    else:
        start = -90.0
        for index, (name, count) in enumerate(sorted(departments.items())):
            sweep = 360.0 * count / total
            color = CHART_COLORS[index % len(CHART_COLORS)]
            draw.pieslice(box, start=start, end=start + sweep, fill=color, outline='white')

            # Label at the middle of the slice
            middle = math.radians(start + sweep / 2)
            radius = (size - 20) / 3
            label_x = size / 2 + radius * math.cos(middle)
            label_y = size / 2 + radius * math.sin(middle)
            label = f"{name} {count}"
            left, top, right, bottom = draw.textbbox((0, 0), label)
            draw.text(
                (label_x - (right - left) / 2, label_y - (bottom - top) / 2),
                label,
                fill='white'
            )
            start += sweep

    buffer = io.BytesIO()
    img.save(buffer, format='PNG')
    return buffer.getvalue()


def format_dashboard(stats):
    """Plain-text rendering of build_dashboard_stats() for the terminal"""
    lines = [
        f"Total Attendance: {stats['total']}",
        f"Today's Check-ins: {stats['today']}",
        f"Departments: {stats['department_count']}",
        "",
        "Department Distribution:",
    ]
    for name, count in sorted(stats['departments'].items(), key=lambda item: -item[1]):
        lines.append(f"  {name:<15} {count}")
    lines.append("")
    lines.append("Recent Activity:")
    if not stats['recent']:
        lines.append("  No recent activity")
    for record in stats['recent']:
        lines.append(
            f"  {record['id']} - {record['department']} | {record['timestamp']} | "
            f"{record['location_address']} | {record['ip_address']}"
        )
    return "\n".join(lines)
