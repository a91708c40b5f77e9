"""
Record the duration unit and billable units on each transaction.

With both stored, the base amount can be traced back to the order
(e.g. 2 weeks of rent-a-lover bills 14 days).
"""

from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("settlements", "0001_initial"),
    ]

    operations = [
        migrations.AlterField(
            model_name="transaction",
            name="duration",
            field=models.DecimalField(
                decimal_places=2,
                help_text="Requested duration, in duration_unit",
                max_digits=10,
            ),
        ),
        migrations.AddField(
            model_name="transaction",
            name="duration_unit",
            field=models.CharField(
                default="",
                help_text="Unit of duration (days, weeks, hours, ...)",
                max_length=10,
            ),
            preserve_default=False,
        ),
        migrations.AddField(
            model_name="transaction",
            name="billable_units",
            field=models.PositiveIntegerField(
                default=0,
                help_text="Whole units billed, in the service kind's canonical unit",
            ),
            preserve_default=False,
        ),
    ]
