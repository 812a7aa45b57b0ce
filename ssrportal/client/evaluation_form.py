# ssrportal/client/evaluation_form.py
"""
Mentor evaluation form: load from the server, edit marks, show live totals,
then save through POST (first time) or PUT (afterwards).
"""
import logging
from decimal import Decimal, InvalidOperation

from ssrportal.client.form_state import FormState, MemberMarksTable
from ssrportal.services import scoring

logger = logging.getLogger(__name__)

EVALUATE_PATH = "/api/mentor/teams/evaluate"

GROUP_BOUNDS = {b.field: b for b in scoring.GROUP_BOUNDS}
MEMBER_BOUNDS = {b.field: b for b in scoring.MEMBER_BOUNDS}


def _to_decimal(raw):
    if raw is None or raw == "":
        return scoring.ZERO
    try:
        value = Decimal(str(raw))
    except InvalidOperation:
        raise ValueError(f"Not a number: {raw!r}")
    if not value.is_finite():
        raise ValueError(f"Not a number: {raw!r}")
    return value


def _snapshot_from_evaluation(evaluation):
    members = [{"id": r["teamMemberId"], "name": r["memberName"], "email": r["memberEmail"]}
               for r in evaluation["individualEvaluations"]]
    table = MemberMarksTable([m["id"] for m in members], {
        r["teamMemberId"]: {f: _to_decimal(r.get(f)) for f in MEMBER_BOUNDS}
        for r in evaluation["individualEvaluations"]
    })
    snapshot = {f: _to_decimal(evaluation.get(f)) for f in GROUP_BOUNDS}
    snapshot.update({
        "externalEvaluatorName": evaluation.get("externalEvaluatorName") or "",
        "externalEvaluatorEmail": evaluation.get("externalEvaluatorEmail") or "",
        "remarks": evaluation.get("remarks") or "",
        "status": evaluation.get("status") or "DRAFT",
        "members": table,
    })
    return members, snapshot


def _snapshot_from_shell(shell):
    members = [{"id": m["id"], "name": m["name"], "email": m["email"]} for m in shell["members"]]
    table = MemberMarksTable([m["id"] for m in members], {
        m["id"]: {f: scoring.ZERO for f in MEMBER_BOUNDS} for m in members
    })
    snapshot = {f: scoring.ZERO for f in GROUP_BOUNDS}
    snapshot.update({
        "externalEvaluatorName": "",
        "externalEvaluatorEmail": "",
        "remarks": "",
        "status": "DRAFT",
        "members": table,
    })
    return members, snapshot


class EvaluationForm:

    def __init__(self, client, team_id):
        self.client = client
        self.team_id = str(team_id)
        self.exists = False
        self.members = []
        self.state = FormState()

    def load(self):
        data = self.client.get_json(EVALUATE_PATH, params={"teamId": self.team_id})
        self.exists = bool(data.get("found"))
        if self.exists:
            self.members, snapshot = _snapshot_from_evaluation(data["evaluation"])
        else:
            self.members, snapshot = _snapshot_from_shell(data["teamShell"])
        self.state = FormState.load(snapshot)
        return self

    # editing

    def set_field(self, key, value):
        self.state = self.state.set(key, value)

    def set_group_mark(self, field, raw):
        if field not in GROUP_BOUNDS:
            raise KeyError(field)
        self.state = self.state.set(field, _to_decimal(raw))

    def blur_group_mark(self, field):
        b = GROUP_BOUNDS[field]
        self.state = self.state.set(field, scoring.clamp(self.state.get(field), b.minimum, b.maximum))

    def set_member_mark(self, member_id, field, raw):
        if field not in MEMBER_BOUNDS:
            raise KeyError(field)
        table = self.state.get("members").upsert(member_id, **{field: _to_decimal(raw)})
        self.state = self.state.set("members", table)

    def blur_member_mark(self, member_id, field):
        b = MEMBER_BOUNDS[field]
        table = self.state.get("members")
        value = table.get(member_id, {}).get(field, scoring.ZERO)
        self.state = self.state.set("members", table.upsert(
            member_id, **{field: scoring.clamp(value, b.minimum, b.maximum)}))

    def cancel(self):
        self.state = self.state.revert()

    # derived

    def group_score(self):
        return scoring.group_score(*(self.state.get(f) for f in GROUP_BOUNDS))

    def member_totals(self):
        group = self.group_score()
        return {
            member_id: scoring.member_totals(
                group,
                marks["individualScore"],
                marks["learningContribution"],
                marks["presentationSkill"],
                marks["contributionToProject"],
            )
            for member_id, marks in self.state.get("members")
        }

    # saving

    def to_payload(self, status=None):
        draft = self.state.draft
        table = draft["members"]
        by_id = {m["id"]: m for m in self.members}
        return {
            "teamId": self.team_id,
            **{f: float(draft[f]) for f in GROUP_BOUNDS},
            "individualEvaluations": [
                {
                    "teamMemberId": member_id,
                    "memberName": by_id[member_id]["name"],
                    "memberEmail": by_id[member_id]["email"],
                    **{f: float(marks.get(f, scoring.ZERO)) for f in MEMBER_BOUNDS},
                }
                for member_id, marks in table
            ],
            "externalEvaluatorName": draft.get("externalEvaluatorName") or None,
            "externalEvaluatorEmail": draft.get("externalEvaluatorEmail") or None,
            "status": status or draft.get("status") or "DRAFT",
            "remarks": draft.get("remarks") or None,
        }

    def submit(self, status=None):
        payload = self.to_payload(status)
        if self.exists:
            data = self.client.put_json(EVALUATE_PATH, payload)
        else:
            data = self.client.post_json(EVALUATE_PATH, payload)

        evaluation = data["evaluation"]
        self.members, snapshot = _snapshot_from_evaluation(evaluation)
        self.state = self.state.commit(snapshot)
        self.exists = True
        logger.info(f"Saved evaluation for team {self.team_id} ({evaluation['status']})")
        return evaluation
