import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("applications", "0001_initial"),
        ("listings", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="SecureToken",
            fields=[
                (
                    "token",
                    models.CharField(max_length=128, primary_key=True, serialize=False),
                ),
                ("applicant_uuid", models.UUIDField()),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "application",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="secure_tokens",
                        to="applications.application",
                    ),
                ),
                (
                    "listing",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="secure_tokens",
                        to="listings.listing",
                    ),
                ),
            ],
            options={
                "db_table": "secure_strings",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["application"], name="secure_strings_app_idx"),
                ],
            },
        ),
    ]
