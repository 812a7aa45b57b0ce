# ssrportal/client/proposal_form.py
import logging

from ssrportal.client.upload_coordinator import (
    REQUIRED_CATEGORIES, UploadCoordinator, check_required_categories,
)

logger = logging.getLogger(__name__)

PROPOSALS_PATH = "/api/student/proposals"

# upload category -> proposal payload key
PAYLOAD_KEYS = {
    "report": "attachment",
    "poster": "posterAttachment",
    "ppt": "pptAttachment",
}


class ProposalForm:
    """
    Student proposal submission.

    New files in a category replace that category's attachments; a category
    with no new files keeps what the proposal already has.
    """

    def __init__(self, client, coordinator=None):
        self.client = client
        self.coordinator = coordinator or UploadCoordinator(client)
        self.proposal = None
        self.selected = {key: [] for key, _ in REQUIRED_CATEGORIES}

    def load(self):
        self.proposal = self.client.get_json(PROPOSALS_PATH).get("proposal")
        return self

    def existing_attachments(self):
        if not self.proposal:
            return {key: [] for key in PAYLOAD_KEYS}
        return {key: list(self.proposal.get(payload_key) or []) for key, payload_key in PAYLOAD_KEYS.items()}

    def select(self, category, files):
        if category not in self.selected:
            raise KeyError(category)
        self.selected[category] = list(files)

    def submit(self, title, description, content=None, link=None):
        existing = self.existing_attachments()
        # refuse before any network call
        check_required_categories(self.selected, existing)

        urls = {}
        for category, _ in REQUIRED_CATEGORIES:
            files = self.selected[category]
            if files:
                results = self.coordinator.upload_many(files)
                urls[category] = [r.url for r in results]
            else:
                urls[category] = existing[category]

        payload = {
            "title": title,
            "description": description,
            "content": content,
            "link": link,
            **{PAYLOAD_KEYS[c]: ",".join(u) for c, u in urls.items()},
        }
        data = self.client.post_json(PROPOSALS_PATH, payload)
        self.proposal = data["proposal"]
        self.selected = {key: [] for key, _ in REQUIRED_CATEGORIES}
        logger.info(f"Proposal {self.proposal['id']} saved ({self.proposal['state']})")
        return self.proposal
