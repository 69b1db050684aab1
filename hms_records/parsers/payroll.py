"""
Nómina: PayrollRecord + objetos de valor anidados (componentes salariales,
asistencia, cumplimiento estatutario, préstamos/anticipos).

Todo campo monetario es un float finito: si el origen falta o no se puede
interpretar se usa 0, nunca NaN.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from hms_records.commons.coercion import compact, iso, to_datetime, to_int_map
from hms_records.commons.resolver import FieldResolver, as_record
from hms_records.commons.types import DEFAULTS, RecordDefaults

MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

COMPONENT_TYPES = ("earning", "deduction", "reimbursement")

DEFAULT_LEAVES = {"casual": 0, "sick": 0, "earned": 0, "unpaid": 0, "other": 0}


@dataclass(frozen=True)
class SalaryComponent:
    name: str = ""
    type: str = "earning"
    amount: float = 0.0
    is_percentage: bool = False
    percentage_of: str = "basic"
    is_taxable: bool = True
    is_statutory: bool = False
    calculation_formula: str = ""
    description: str = ""


@dataclass(frozen=True)
class AttendanceSummary:
    total_days: int = 0
    present_days: int = 0
    absent_days: int = 0
    half_days: int = 0
    late_days: int = 0
    overtime_hours: float = 0.0
    leaves: Dict[str, int] = field(default_factory=lambda: dict(DEFAULT_LEAVES))
    holidays: int = 0
    weekends: int = 0


@dataclass(frozen=True)
class StatutoryCompliance:
    pf_number: str = ""
    esi_number: str = ""
    uan_number: str = ""
    pan_number: str = ""
    aadhar_number: str = ""
    pf_applicable: bool = True
    esi_applicable: bool = False
    pt_applicable: bool = True
    employee_pf: float = 0.0
    employer_pf: float = 0.0
    employee_esi: float = 0.0
    employer_esi: float = 0.0
    professional_tax: float = 0.0
    tds_deducted: float = 0.0


@dataclass(frozen=True)
class LoanAdvance:
    type: str = "advance"
    amount: float = 0.0
    installment_amount: float = 0.0
    remaining_amount: float = 0.0
    description: str = ""
    date: datetime = field(default_factory=datetime.now)


@dataclass(frozen=True)
class PayrollRecord:
    id: str = ""
    staff_id: str = ""
    staff_name: str = ""
    staff_code: str = ""
    department: str = ""
    designation: str = ""
    email: str = ""
    contact: str = ""
    pay_period_month: int = 0
    pay_period_year: int = 0
    pay_period_start: datetime = field(default_factory=datetime.now)
    pay_period_end: datetime = field(default_factory=datetime.now)
    payment_date: Optional[datetime] = None
    status: str = DEFAULTS.payroll_status
    basic_salary: float = 0.0
    earnings: List[SalaryComponent] = field(default_factory=list)
    deductions: List[SalaryComponent] = field(default_factory=list)
    reimbursements: List[SalaryComponent] = field(default_factory=list)
    total_earnings: float = 0.0
    total_deductions: float = 0.0
    total_reimbursements: float = 0.0
    gross_salary: float = 0.0
    net_salary: float = 0.0
    ctc: float = 0.0
    attendance: AttendanceSummary = field(default_factory=AttendanceSummary)
    statutory: StatutoryCompliance = field(default_factory=StatutoryCompliance)
    loans_advances: List[LoanAdvance] = field(default_factory=list)
    total_loan_deduction: float = 0.0
    overtime_pay: float = 0.0
    bonus: float = 0.0
    incentives: float = 0.0
    arrears: float = 0.0
    loss_of_pay_days: int = 0
    loss_of_pay_amount: float = 0.0
    payment_mode: str = DEFAULTS.payment_mode
    bank_name: str = ""
    account_number: str = ""
    ifsc_code: str = ""
    transaction_id: str = ""
    cheque_number: str = ""
    submitted_by: str = ""
    submitted_at: Optional[datetime] = None
    approved_by: str = ""
    approved_at: Optional[datetime] = None
    rejected_by: str = ""
    rejected_at: Optional[datetime] = None
    rejection_reason: str = ""
    notes: str = ""
    internal_notes: str = ""
    admin_remarks: str = ""
    revision_number: int = 1
    previous_revision_id: str = ""
    is_revision: bool = False
    tags: List[str] = field(default_factory=list)
    payroll_group: str = DEFAULTS.payroll_group
    metadata: Dict[str, Any] = field(default_factory=dict)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    is_selected: bool = field(default=False, compare=False)

    @property
    def pay_period_display(self) -> str:
        if 1 <= self.pay_period_month <= 12:
            return f"{MONTHS[self.pay_period_month - 1]} {self.pay_period_year}"
        return f"{self.pay_period_month}/{self.pay_period_year}"

    @property
    def payroll_code(self) -> str:
        code = self.metadata.get("payrollCode")
        return str(code) if code is not None else ""

    def __str__(self) -> str:
        return (
            f"Payroll(id: {self.id}, staffName: {self.staff_name}, period: {self.pay_period_display}, "
            f"status: {self.status}, netSalary: {self.net_salary})"
        )


# -------- SalaryComponent --------

def canonicalize_salary_component(raw: Any, default_type: str = "earning") -> SalaryComponent:
    r = FieldResolver(raw)
    tag = r.text("type").strip().lower()
    return SalaryComponent(
        name=r.text("name"),
        type=tag if tag in COMPONENT_TYPES else default_type,
        amount=r.number("amount"),
        is_percentage=r.first("isPercentage") is True,
        percentage_of=r.text("percentageOf", default="basic"),
        is_taxable=r.first("isTaxable") is not False,
        is_statutory=r.first("isStatutory") is True,
        calculation_formula=r.text("calculationFormula"),
        description=r.text("description"),
    )


def serialize_salary_component(component: SalaryComponent) -> Dict[str, Any]:
    return {
        "name": component.name,
        "type": component.type,
        "amount": component.amount,
        "isPercentage": component.is_percentage,
        "percentageOf": component.percentage_of,
        "isTaxable": component.is_taxable,
        "isStatutory": component.is_statutory,
        "calculationFormula": component.calculation_formula,
        "description": component.description,
    }


# -------- AttendanceSummary --------

def canonicalize_attendance(raw: Any) -> AttendanceSummary:
    r = FieldResolver(raw)
    leaves = r.first("leaves")
    return AttendanceSummary(
        total_days=r.integer("totalDays"),
        present_days=r.integer("presentDays"),
        absent_days=r.integer("absentDays"),
        half_days=r.integer("halfDays"),
        late_days=r.integer("lateDays"),
        overtime_hours=r.number("overtimeHours"),
        leaves=to_int_map(leaves) if isinstance(leaves, dict) else dict(DEFAULT_LEAVES),
        holidays=r.integer("holidays"),
        weekends=r.integer("weekends"),
    )


def serialize_attendance(attendance: AttendanceSummary) -> Dict[str, Any]:
    return {
        "totalDays": attendance.total_days,
        "presentDays": attendance.present_days,
        "absentDays": attendance.absent_days,
        "halfDays": attendance.half_days,
        "lateDays": attendance.late_days,
        "overtimeHours": attendance.overtime_hours,
        "leaves": dict(attendance.leaves),
        "holidays": attendance.holidays,
        "weekends": attendance.weekends,
    }


# -------- StatutoryCompliance --------

def canonicalize_statutory(raw: Any) -> StatutoryCompliance:
    r = FieldResolver(raw)
    return StatutoryCompliance(
        pf_number=r.text("pfNumber"),
        esi_number=r.text("esiNumber"),
        uan_number=r.text("uanNumber"),
        pan_number=r.text("panNumber"),
        aadhar_number=r.text("aadharNumber"),
        pf_applicable=r.first("pfApplicable") is not False,
        esi_applicable=r.first("esiApplicable") is True,
        pt_applicable=r.first("ptApplicable") is not False,
        employee_pf=r.number("employeePF"),
        employer_pf=r.number("employerPF"),
        employee_esi=r.number("employeeESI"),
        employer_esi=r.number("employerESI"),
        professional_tax=r.number("professionalTax"),
        tds_deducted=r.number("tdsDeducted"),
    )


def serialize_statutory(statutory: StatutoryCompliance) -> Dict[str, Any]:
    return {
        "pfNumber": statutory.pf_number,
        "esiNumber": statutory.esi_number,
        "uanNumber": statutory.uan_number,
        "panNumber": statutory.pan_number,
        "aadharNumber": statutory.aadhar_number,
        "pfApplicable": statutory.pf_applicable,
        "esiApplicable": statutory.esi_applicable,
        "ptApplicable": statutory.pt_applicable,
        "employeePF": statutory.employee_pf,
        "employerPF": statutory.employer_pf,
        "employeeESI": statutory.employee_esi,
        "employerESI": statutory.employer_esi,
        "professionalTax": statutory.professional_tax,
        "tdsDeducted": statutory.tds_deducted,
    }


# -------- LoanAdvance --------

def canonicalize_loan_advance(raw: Any) -> LoanAdvance:
    r = FieldResolver(raw)
    return LoanAdvance(
        type=r.text("type", default="advance"),
        amount=r.number("amount"),
        installment_amount=r.number("installmentAmount"),
        remaining_amount=r.number("remainingAmount"),
        description=r.text("description"),
        date=to_datetime(r.first("date")),
    )


def serialize_loan_advance(loan: LoanAdvance) -> Dict[str, Any]:
    return {
        "type": loan.type,
        "amount": loan.amount,
        "installmentAmount": loan.installment_amount,
        "remainingAmount": loan.remaining_amount,
        "description": loan.description,
        "date": iso(loan.date),
    }


# -------- PayrollRecord --------

def _list_of(value: Any, parse, *args) -> list:
    if not isinstance(value, list):
        return []
    return [parse(item, *args) for item in value if isinstance(item, dict)]


def canonicalize_payroll(raw: Any, defaults: Optional[RecordDefaults] = None) -> PayrollRecord:
    defaults = defaults or DEFAULTS
    r = FieldResolver(raw)
    attendance = r.first("attendance")
    statutory = r.first("statutory")
    metadata = r.first("metadata")

    return PayrollRecord(
        id=r.text("_id", "id"),
        staff_id=r.text("staffId"),
        staff_name=r.text("staffName"),
        staff_code=r.text("staffCode"),
        department=r.text("department"),
        designation=r.text("designation"),
        email=r.text("email"),
        contact=r.text("contact"),
        pay_period_month=r.integer("payPeriodMonth"),
        pay_period_year=r.integer("payPeriodYear"),
        pay_period_start=to_datetime(r.first("payPeriodStart")),
        pay_period_end=to_datetime(r.first("payPeriodEnd")),
        payment_date=r.moment("paymentDate"),
        status=r.text("status", default=defaults.payroll_status),
        basic_salary=r.number("basicSalary"),
        earnings=_list_of(r.first("earnings"), canonicalize_salary_component),
        deductions=_list_of(r.first("deductions"), canonicalize_salary_component, "deduction"),
        reimbursements=_list_of(r.first("reimbursements"), canonicalize_salary_component, "reimbursement"),
        total_earnings=r.number("totalEarnings"),
        total_deductions=r.number("totalDeductions"),
        total_reimbursements=r.number("totalReimbursements"),
        gross_salary=r.number("grossSalary"),
        net_salary=r.number("netSalary"),
        ctc=r.number("ctc"),
        attendance=canonicalize_attendance(attendance)
        if isinstance(attendance, dict)
        else AttendanceSummary(),
        statutory=canonicalize_statutory(statutory)
        if isinstance(statutory, dict)
        else StatutoryCompliance(),
        loans_advances=_list_of(r.first("loansAdvances"), canonicalize_loan_advance),
        total_loan_deduction=r.number("totalLoanDeduction"),
        overtime_pay=r.number("overtimePay"),
        bonus=r.number("bonus"),
        incentives=r.number("incentives"),
        arrears=r.number("arrears"),
        loss_of_pay_days=r.integer("lossOfPayDays"),
        loss_of_pay_amount=r.number("lossOfPayAmount"),
        payment_mode=r.text("paymentMode", default=defaults.payment_mode),
        bank_name=r.text("bankName"),
        account_number=r.text("accountNumber"),
        ifsc_code=r.text("ifscCode"),
        transaction_id=r.text("transactionId"),
        cheque_number=r.text("chequeNumber"),
        submitted_by=r.text("submittedBy"),
        submitted_at=r.moment("submittedAt"),
        approved_by=r.text("approvedBy"),
        approved_at=r.moment("approvedAt"),
        rejected_by=r.text("rejectedBy"),
        rejected_at=r.moment("rejectedAt"),
        rejection_reason=r.text("rejectionReason"),
        notes=r.text("notes"),
        internal_notes=r.text("internalNotes"),
        admin_remarks=r.text("adminRemarks"),
        revision_number=max(r.integer("revisionNumber"), 1),
        previous_revision_id=r.text("previousRevisionId"),
        is_revision=r.first("isRevision") is True,
        tags=r.str_list("tags"),
        payroll_group=r.text("payrollGroup", default=defaults.payroll_group),
        metadata=dict(as_record(metadata)),
        created_at=r.moment("createdAt"),
        updated_at=r.moment("updatedAt"),
        is_selected=r.first("isSelected") is True,
    )


def serialize_payroll(payroll: PayrollRecord) -> Dict[str, Any]:
    out: Dict[str, Any] = compact({"_id": payroll.id})
    out.update(
        {
            "staffId": payroll.staff_id,
            "staffName": payroll.staff_name,
            "staffCode": payroll.staff_code,
            "department": payroll.department,
            "designation": payroll.designation,
            "email": payroll.email,
            "contact": payroll.contact,
            "payPeriodMonth": payroll.pay_period_month,
            "payPeriodYear": payroll.pay_period_year,
            "payPeriodStart": iso(payroll.pay_period_start),
            "payPeriodEnd": iso(payroll.pay_period_end),
        }
    )
    out.update(compact({"paymentDate": iso(payroll.payment_date)}))
    out.update(
        {
            "status": payroll.status,
            "basicSalary": payroll.basic_salary,
            "earnings": [serialize_salary_component(c) for c in payroll.earnings],
            "deductions": [serialize_salary_component(c) for c in payroll.deductions],
            "reimbursements": [serialize_salary_component(c) for c in payroll.reimbursements],
            "totalEarnings": payroll.total_earnings,
            "totalDeductions": payroll.total_deductions,
            "totalReimbursements": payroll.total_reimbursements,
            "grossSalary": payroll.gross_salary,
            "netSalary": payroll.net_salary,
            "ctc": payroll.ctc,
            "attendance": serialize_attendance(payroll.attendance),
            "statutory": serialize_statutory(payroll.statutory),
            "loansAdvances": [serialize_loan_advance(loan) for loan in payroll.loans_advances],
            "totalLoanDeduction": payroll.total_loan_deduction,
            "overtimePay": payroll.overtime_pay,
            "bonus": payroll.bonus,
            "incentives": payroll.incentives,
            "arrears": payroll.arrears,
            "lossOfPayDays": payroll.loss_of_pay_days,
            "lossOfPayAmount": payroll.loss_of_pay_amount,
            "paymentMode": payroll.payment_mode,
            "bankName": payroll.bank_name,
            "accountNumber": payroll.account_number,
            "ifscCode": payroll.ifsc_code,
            "transactionId": payroll.transaction_id,
            "chequeNumber": payroll.cheque_number,
            "submittedBy": payroll.submitted_by,
        }
    )
    out.update(compact({"submittedAt": iso(payroll.submitted_at)}))
    out["approvedBy"] = payroll.approved_by
    out.update(compact({"approvedAt": iso(payroll.approved_at)}))
    out["rejectedBy"] = payroll.rejected_by
    out.update(compact({"rejectedAt": iso(payroll.rejected_at)}))
    out.update(
        {
            "rejectionReason": payroll.rejection_reason,
            "notes": payroll.notes,
            "internalNotes": payroll.internal_notes,
            "adminRemarks": payroll.admin_remarks,
            "revisionNumber": payroll.revision_number,
            "previousRevisionId": payroll.previous_revision_id,
            "isRevision": payroll.is_revision,
            "tags": list(payroll.tags),
            "payrollGroup": payroll.payroll_group,
            "metadata": dict(payroll.metadata),
        }
    )
    out.update(compact({"createdAt": iso(payroll.created_at), "updatedAt": iso(payroll.updated_at)}))
    return out
