# -*- coding: utf-8 -*-

from __future__ import annotations

import shutil
import tempfile
import unittest
from datetime import datetime, timezone
from pathlib import Path

from nutriflow.appointments.storage import create_appointment, to_calendar_event
from nutriflow.dashboard.storage import build_dashboard, patients_per_month
from nutriflow.diet_plans.storage import (
    add_meal,
    add_meal_item,
    create_plan,
    duplicate_plan,
    export_lines,
    list_plans,
    remove_meal_item,
)
from nutriflow.docstore import DocumentStore
from nutriflow.errors import ValidationFailedError, WriteFailedError
from nutriflow.financial.storage import (
    calculate_stats,
    category_breakdown,
    chart_data,
    create_record,
    list_month_records,
    month_bounds,
)
from nutriflow.patients.storage import add_measurement, compute_imc, create_patient, update_patient
from nutriflow.profile.storage import create_profile, get_profile, update_profile
from nutriflow.repository import ScopedRepository
from nutriflow.session import Session, SessionContext


class TestFinancial(unittest.TestCase):
    def test_stats_count_paid_and_pending_income_only(self) -> None:
        records = [
            {"type": "income", "status": "paid", "value": 100},
            {"type": "expense", "status": "paid", "value": 40},
            {"type": "income", "status": "pending", "value": 25},
            {"type": "income", "status": "canceled", "value": 10},
        ]
        self.assertEqual(
            calculate_stats(records),
            {"totalIncome": 100, "totalExpenses": 40, "pendingIncome": 25, "balance": 60},
        )

    def test_chart_and_categories_use_paid_records(self) -> None:
        may = datetime(2024, 5, 3, tzinfo=timezone.utc)
        june = datetime(2024, 6, 1, tzinfo=timezone.utc)
        records = [
            {"type": "income", "status": "paid", "value": 200, "date": june, "category": "consultation"},
            {"type": "expense", "status": "paid", "value": 50, "date": may, "category": "office"},
            {"type": "income", "status": "paid", "value": 120, "date": may},
            {"type": "income", "status": "pending", "value": 999, "date": may, "category": "consultation"},
        ]
        self.assertEqual(
            chart_data(records),
            [
                {"month": "mai", "income": 120, "expenses": 50, "profit": 70},
                {"month": "jun", "income": 200, "expenses": 0, "profit": 200},
            ],
        )
        self.assertEqual(
            category_breakdown(records),
            [
                {"category": "consultation", "name": "Consultas", "value": 200},
                {"category": "office", "name": "Escritório", "value": 50},
                {"category": "other", "name": "Outros", "value": 120},
            ],
        )

    def test_month_bounds_cover_the_whole_month(self) -> None:
        start, end = month_bounds(2024, 2)
        self.assertEqual(start, datetime(2024, 2, 1, tzinfo=timezone.utc))
        self.assertEqual((end.day, end.hour, end.minute), (29, 23, 59))


class _StoreCase(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = Path(tempfile.mkdtemp(prefix="nutriflow-domain-"))
        self.store = DocumentStore(self._tmp / "store.db")
        self.repo = ScopedRepository(SessionContext(Session(id="pro")))

    def tearDown(self) -> None:
        shutil.rmtree(self._tmp, ignore_errors=True)

    def _patient(self, name: str = "Maria Silva") -> dict:
        return create_patient(
            self.store,
            self.repo,
            {"name": name, "email": "maria@example.com", "phone": "11999990000", "birthDate": "1990-04-12"},
        )


class TestFinancialRecords(_StoreCase):
    def test_month_records_and_copied_patient_name(self) -> None:
        patient = self._patient()
        create_record(
            self.store,
            self.repo,
            {"description": "Consulta", "value": 150, "date": datetime(2024, 5, 2, tzinfo=timezone.utc),
             "type": "income", "status": "paid", "patientId": patient["id"]},
        )
        create_record(
            self.store,
            self.repo,
            {"description": "Aluguel", "value": 900, "date": datetime(2024, 5, 20, tzinfo=timezone.utc),
             "type": "expense", "status": "paid"},
        )
        create_record(
            self.store,
            self.repo,
            {"description": "Junho", "value": 10, "date": datetime(2024, 6, 1, tzinfo=timezone.utc),
             "type": "income", "status": "paid"},
        )
        update_patient(self.store, self.repo, patient["id"], {"name": "Maria Souza"})

        may = list_month_records(self.store, self.repo, 2024, 5)
        self.assertEqual([r["description"] for r in may], ["Aluguel", "Consulta"])
        self.assertEqual(may[1]["patientName"], "Maria Silva")

    def test_required_fields(self) -> None:
        with self.assertRaises(ValidationFailedError):
            create_record(self.store, self.repo, {"description": "", "value": 10, "date": datetime.now(timezone.utc)})
        with self.assertRaises(ValidationFailedError):
            create_record(self.store, self.repo, {"description": "x", "value": 0, "date": datetime.now(timezone.utc)})


class TestDietPlans(_StoreCase):
    def test_duplicate_gets_new_id_and_copy_suffix(self) -> None:
        macros = {"protein": 120, "carbs": 200, "fat": 55, "fiber": 30}
        plan = create_plan(
            self.store, self.repo, {"title": "Plano A", "totalCalories": 1800, "macros": macros, "meals": []}
        )
        plan = add_meal(self.store, self.repo, plan["id"], {"name": "Almoço", "time": "12:00"})
        plan = add_meal_item(
            self.store, self.repo, plan["id"], 0, {"food": "Arroz", "quantity": "100", "unit": "g", "calories": 130}
        )

        copy = duplicate_plan(self.store, self.repo, plan["id"])
        self.assertNotEqual(copy["id"], plan["id"])
        self.assertEqual(copy["title"], "Plano A - Cópia")
        self.assertEqual(copy["meals"], plan["meals"])
        self.assertEqual(copy["macros"], macros)
        self.assertEqual(copy["macros"], plan["macros"])
        self.assertEqual(copy["totalCalories"], 1800)
        self.assertGreaterEqual(copy["createdAt"], plan["createdAt"])

        titles = sorted(p["title"] for p in list_plans(self.store, self.repo))
        self.assertEqual(titles, ["Plano A", "Plano A - Cópia"])

    def test_meal_and_item_validation(self) -> None:
        with self.assertRaises(ValidationFailedError) as ctx:
            create_plan(self.store, self.repo, {"title": "  "})
        self.assertEqual(ctx.exception.message_key, "plan_title_required")

        plan = create_plan(self.store, self.repo, {"title": "Plano B"})
        with self.assertRaises(ValidationFailedError) as ctx:
            add_meal(self.store, self.repo, plan["id"], {"name": "Jantar", "time": ""})
        self.assertEqual(ctx.exception.message_key, "meal_fields_required")

        add_meal(self.store, self.repo, plan["id"], {"name": "Jantar", "time": "19:00"})
        with self.assertRaises(ValidationFailedError) as ctx:
            add_meal_item(self.store, self.repo, plan["id"], 0, {"food": "Sopa", "quantity": ""})
        self.assertEqual(ctx.exception.message_key, "food_fields_required")

    def test_removing_an_item_recomputes_meal_calories(self) -> None:
        plan = create_plan(self.store, self.repo, {"title": "Plano C"})
        add_meal(self.store, self.repo, plan["id"], {"name": "Lanche", "time": "16:00"})
        add_meal_item(self.store, self.repo, plan["id"], 0, {"food": "Maçã", "quantity": "1", "calories": 52})
        plan = add_meal_item(self.store, self.repo, plan["id"], 0, {"food": "Iogurte", "quantity": "1", "calories": 90})
        self.assertEqual(plan["meals"][0]["calories"], 142)

        plan = remove_meal_item(self.store, self.repo, plan["id"], 0, 1)
        self.assertEqual(plan["meals"][0]["calories"], 52)

    def test_export_lines(self) -> None:
        plan = {
            "title": "Plano D",
            "objective": "Emagrecimento",
            "totalCalories": 1600,
            "macros": {"protein": 120, "carbs": 150, "fat": 50},
            "meals": [{"name": "Almoço", "time": "12:00", "items": [
                {"food": "Frango", "quantity": "150", "unit": "g", "calories": 240}]}],
            "recommendations": ["Beber 2L de água"],
        }
        lines = export_lines(plan)
        self.assertEqual(lines[:4], ["Plano Alimentar", "Plano D", "Objetivo: Emagrecimento", "Calorias totais: 1600 kcal"])
        self.assertIn("Almoço (12:00)", lines)
        self.assertIn("• Frango - 150 g (240 kcal)", lines)
        self.assertEqual(lines[-1], "• Beber 2L de água")


class TestPatientsAndAppointments(_StoreCase):
    def test_measurements_keep_date_order_and_compute_imc(self) -> None:
        patient = self._patient()
        add_measurement(self.store, self.repo, patient["id"], {"date": "2024-03-01T00:00:00Z", "weight": 80, "height": 170})
        patient = add_measurement(self.store, self.repo, patient["id"], {"date": "2024-01-01T00:00:00Z", "weight": 82})
        self.assertEqual([m["weight"] for m in patient["anthropometricData"]], [82, 80])
        self.assertEqual(patient["anthropometricData"][1]["imc"], compute_imc(80, 170))
        self.assertNotIn("imc", patient["anthropometricData"][0])

    def test_appointment_copies_patient_name_and_builds_calendar_event(self) -> None:
        patient = self._patient("João Lima")
        appt = create_appointment(
            self.store,
            self.repo,
            {"patientId": patient["id"], "date": datetime(2030, 1, 2, 9, 0, tzinfo=timezone.utc), "duration": 45},
        )
        self.assertEqual(appt["nutritionistId"], "pro")
        self.assertEqual(appt["patientName"], "João Lima")

        event = to_calendar_event(appt)
        self.assertEqual(event["title"], "João Lima")
        self.assertEqual(event["end"], datetime(2030, 1, 2, 9, 45, tzinfo=timezone.utc))


class TestProfile(_StoreCase):
    def test_account_sync_failure_surfaces_as_a_profile_error(self) -> None:
        # This store was never given an accounts table, so the display-name sync fails.
        create_profile(self.store, uid="pro", name="Dra. Ana", email="ana@example.com")
        with self.assertLogs("nutriflow.errors", level="ERROR"):
            with self.assertRaises(WriteFailedError) as ctx:
                update_profile(self.store, self.repo, {"name": "Dra. Ana Lima"})
        self.assertEqual(ctx.exception.message_key, "profile_update_failed")
        self.assertEqual(ctx.exception.path, "accounts/pro")
        self.assertEqual(get_profile(self.store, self.repo)["name"], "Dra. Ana Lima")


class TestDashboard(_StoreCase):
    def test_overview_numbers(self) -> None:
        now = datetime.now(timezone.utc)
        for i in range(6):
            self._patient(f"Paciente {i}")
        patient = self._patient("Último Paciente")
        create_appointment(
            self.store,
            self.repo,
            {"patientId": patient["id"], "date": datetime(2099, 1, 1, tzinfo=timezone.utc), "status": "scheduled"},
        )
        create_record(
            self.store,
            self.repo,
            {"description": "Consulta", "value": 200, "date": now, "type": "income", "status": "paid"},
        )

        overview = build_dashboard(self.store, self.repo, now=now)
        self.assertEqual(overview["stats"]["totalPatients"], 7)
        self.assertEqual(overview["stats"]["monthlyPatients"], 7)
        self.assertEqual(overview["stats"]["monthlyRevenue"], 200)
        self.assertEqual(len(overview["recentPatients"]), 5)
        self.assertEqual(overview["recentPatients"][0]["name"], "Último Paciente")
        self.assertEqual(len(overview["upcomingAppointments"]), 1)
        self.assertEqual(overview["patientsChart"][-1]["patients"], 7)

    def test_patients_per_month_is_cumulative(self) -> None:
        patients = [
            {"createdAt": datetime(2024, 1, 15, tzinfo=timezone.utc)},
            {"createdAt": datetime(2024, 3, 2, tzinfo=timezone.utc)},
        ]
        points = patients_per_month(patients, datetime(2024, 3, 20, tzinfo=timezone.utc), months=3)
        self.assertEqual(points, [
            {"month": "jan", "patients": 1},
            {"month": "fev", "patients": 1},
            {"month": "mar", "patients": 2},
        ])


if __name__ == "__main__":
    unittest.main()
