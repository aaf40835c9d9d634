"""Rendering of notification subjects and bodies.

Site owners may supply their own HTML templates with ``${NAME}``
placeholders; those are filled by literal substitution only. Without a
custom template the built-in Jinja2 layouts from the email_templates
package directory are used.
"""

import logging
from typing import Dict, Mapping, Optional

from jinja2 import Environment, PackageLoader, StrictUndefined, TemplateError, select_autoescape

from comment_notify.domain.models import NotifyConfig

from .models import NotificationTemplateError

logger = logging.getLogger(__name__)

OWNER_PLACEHOLDERS = (
    "SITE_URL", "SITE_NAME", "NICK", "IMG", "IP", "MAIL", "COMMENT", "POST_URL",
)
REPLY_PLACEHOLDERS = (
    "IMG", "PARENT_IMG", "SITE_URL", "SITE_NAME", "PARENT_NICK", "PARENT_COMMENT",
    "NICK", "COMMENT", "POST_URL",
)


def substitute_placeholders(template: str, values: Mapping[str, str], names=None) -> str:
    """Replace every ``${NAME}`` token for the given placeholder names.

    Tokens not in ``names`` (and any other text) are left untouched.

    Example:
        >>> substitute_placeholders("Hi ${NICK}, ${COMMENT}", {"NICK": "Bob", "COMMENT": "hello"})
        'Hi Bob, hello'
    """
    result = template
    for name in names if names is not None else values.keys():
        result = result.replace("${" + name + "}", str(values.get(name, "")))
    return result


class TemplateRenderer:
    """Renders owner, reply and push notifications.

    Built-in templates are cached by the Jinja2 environment after first use.
    HTML layouts are auto-escaped; comment bodies are inserted as-is because
    they are already HTML.
    """

    def __init__(self, template_dir: str = "email_templates"):
        """
        Args:
            template_dir: Directory name within the notifications package
        """
        self.env = Environment(
            loader=PackageLoader("comment_notify.notifications", template_dir),
            autoescape=select_autoescape(enabled_extensions=("html.j2",), default_for_string=False),
            undefined=StrictUndefined,
        )

    def _render(self, template_name: str, context: Mapping[str, str]) -> str:
        try:
            return self.env.get_template(template_name).render(context)
        except TemplateError as e:
            error_msg = f"Template rendering failed for {template_name}: {e}"
            logger.error(error_msg, exc_info=True)
            raise NotificationTemplateError(error_msg) from e

    def _subject(self, override: Optional[str], template_name: str, context: Mapping[str, str]) -> str:
        if override:
            return override
        return self._render(template_name, context).strip().replace("\n", " ")

    def render_owner_mail(self, context: Mapping[str, str], config: NotifyConfig) -> Dict[str, str]:
        """Subject and HTML body of the new-comment mail to the owner.

        Raises:
            NotificationTemplateError: If a built-in template fails to render
        """
        subject = self._subject(config.mail_subject_admin, "owner_subject.j2", context)
        if config.mail_template_admin:
            html = substitute_placeholders(config.mail_template_admin, context, OWNER_PLACEHOLDERS)
        else:
            html = self._render("owner_notice.html.j2", context)
        return {"subject": subject, "html": html}

    def render_reply_mail(self, context: Mapping[str, str], config: NotifyConfig) -> Dict[str, str]:
        """Subject and HTML body of the reply mail to the parent's author.

        Raises:
            NotificationTemplateError: If a built-in template fails to render
        """
        subject = self._subject(config.mail_subject, "reply_subject.j2", context)
        if config.mail_template:
            html = substitute_placeholders(config.mail_template, context, REPLY_PLACEHOLDERS)
        else:
            html = self._render("reply_notice.html.j2", context)
        return {"subject": subject, "html": html}

    def render_push(self, context: Mapping[str, str], config: NotifyConfig) -> Dict[str, str]:
        """Title and markdown content of the instant-message push."""
        title = self._subject(config.mail_subject_admin, "push_title.j2", context)
        content = self._render("push_content.md.j2", context).strip()
        return {"title": title, "content": content}
