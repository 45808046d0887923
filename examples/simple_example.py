#!/usr/bin/env python3
"""
Simple Example: Certificates from a CSV File

Places two fields on a template, previews the first row, and exports every row.
"""

from pathlib import Path

from certgen import Session, Settings, Template
from certgen.utils.tabular import load_rows, validate_rows

template = Template.from_path(Path("template.png"))  # Replace with your template image
rows = load_rows(Path("students.csv"))  # Columns: Name, Course

session = Session(template, settings=Settings(download_google_fonts=True))

name = session.add_field(label="Name", x=400, y=520, width=1600, height=160, font_size=120)
session.add_field(label="Course", x=400, y=760, width=1600, height=100, font_size=64, color="#444444")

validate_rows(rows, [field.label for field in session.fields])
session.set_rows(rows)

# Size the name box to the previewed student's name
session.update_field(name.id, {"auto_width": True})

Path("preview.png").write_bytes(session.preview_png())
print("✓ Preview saved to: preview.png")

result = session.export_all(progress=lambda done, total: print(f"  {done}/{total}"))
result.save(Path(session.settings.archive_name))
print(f"✓ {len(result.entry_names)} certificate(s) saved to: {session.settings.archive_name}")
