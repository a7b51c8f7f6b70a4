from typing import Dict, List

from sitescore.models.schemas import (
    HeaderName,
    Recommendation,
    RecommendationContext,
    SSL_UNAVAILABLE,
    by_priority,
)

WEAK_SSL_GRADES = ("C", "D", "F")


def _rec(priority: str, category: str, title: str, description: str,
         action: str, impact: str) -> Recommendation:
    return Recommendation(
        priority=priority,
        category=category,
        title=title,
        description=description,
        action=action,
        impact=impact,
    )


# ---------- SSL/TLS ----------
def _ssl_rules(grade: str) -> List[Recommendation]:
    if not grade or grade == SSL_UNAVAILABLE:
        return [_rec(
            "critical", "SSL/TLS", "Enable HTTPS Encryption",
            "Your website is not using HTTPS encryption. This exposes user data to interception and eavesdropping.",
            "Purchase and install an SSL/TLS certificate. Consider using Let's Encrypt for free certificates, "
            "or contact your hosting provider for SSL installation.",
            "Protects sensitive data in transit, prevents man-in-the-middle attacks, and builds user trust "
            "with the padlock icon in browsers.",
        )]
    if grade in WEAK_SSL_GRADES:
        return [_rec(
            "high", "SSL/TLS", "Upgrade SSL/TLS Configuration",
            f"Your SSL/TLS grade is {grade}, indicating weak encryption or outdated protocols that attackers can exploit.",
            "Update your server configuration to support only TLS 1.2 and TLS 1.3. Disable weak cipher suites "
            "and deprecated protocols like TLS 1.0 and 1.1.",
            "Prevents man-in-the-middle attacks, protects against known SSL vulnerabilities, and meets modern "
            "security standards.",
        )]
    if grade == "B":
        return [_rec(
            "medium", "SSL/TLS", "Optimize SSL/TLS Configuration",
            "Your SSL/TLS configuration is functional but can be improved for better security.",
            "Review and optimize your cipher suite ordering, enable HSTS with a long max-age, and ensure "
            "forward secrecy is properly configured.",
            "Achieves industry best practices for encryption and maximizes protection against future vulnerabilities.",
        )]
    return []


# ---------- Security headers ----------
HEADER_RULES: Dict[HeaderName, Recommendation] = {
    HeaderName.HSTS: _rec(
        "high", "Security Headers", "Implement HTTP Strict Transport Security (HSTS)",
        "HSTS is not configured on your website. This leaves you vulnerable to protocol downgrade attacks "
        "where attackers force HTTP connections.",
        "Add the Strict-Transport-Security header to your server configuration: "
        "'max-age=31536000; includeSubDomains; preload'. Then submit your domain to the HSTS preload list.",
        "Forces browsers to always connect via HTTPS, preventing SSL stripping attacks and ensuring all "
        "connections are encrypted.",
    ),
    HeaderName.X_FRAME_OPTIONS: _rec(
        "high", "Security Headers", "Prevent Clickjacking Attacks",
        "The X-Frame-Options header is missing. Your website can be embedded in malicious iframes, "
        "enabling clickjacking attacks.",
        "Add the X-Frame-Options header to your server: 'X-Frame-Options: DENY' to prevent all framing, "
        "or 'SAMEORIGIN' to allow framing only from your own domain.",
        "Protects your users from clickjacking attacks where attackers trick them into clicking hidden elements.",
    ),
    HeaderName.X_CONTENT_TYPE_OPTIONS: _rec(
        "medium", "Security Headers", "Prevent MIME Type Sniffing",
        "The X-Content-Type-Options header is missing, allowing browsers to MIME-sniff responses and "
        "potentially execute malicious content.",
        "Add 'X-Content-Type-Options: nosniff' to your server configuration to prevent browsers from "
        "interpreting files as a different MIME type.",
        "Prevents browsers from executing malicious content by strictly enforcing declared content types.",
    ),
    HeaderName.CSP: _rec(
        "high", "Security Headers", "Add Content Security Policy",
        "Your website lacks a Content Security Policy (CSP), leaving it vulnerable to cross-site scripting "
        "(XSS) and data injection attacks.",
        "Implement a Content-Security-Policy header that defines which resources can be loaded. Start with a "
        "basic policy and gradually tighten it: \"default-src 'self'; script-src 'self'; style-src 'self'\".",
        "Prevents XSS attacks, data injection, and unauthorized code execution by controlling which resources "
        "browsers can load.",
    ),
    HeaderName.X_XSS_PROTECTION: _rec(
        "low", "Security Headers", "Enable XSS Protection",
        "The X-XSS-Protection header is not set, missing an additional layer of XSS attack protection.",
        "Add 'X-XSS-Protection: 1; mode=block' to your server headers to enable the browser's built-in XSS filter.",
        "Provides an additional layer of protection against reflected XSS attacks in older browsers.",
    ),
    HeaderName.REFERRER_POLICY: _rec(
        "low", "Security Headers", "Control Referrer Information",
        "Your Referrer-Policy is not set, potentially leaking sensitive information through referrer headers.",
        "Add 'Referrer-Policy: strict-origin-when-cross-origin' or 'no-referrer' to control what referrer "
        "information is sent with requests.",
        "Protects user privacy by controlling what URL information is shared with external sites.",
    ),
}


def _header_rules(missing: List[HeaderName]) -> List[Recommendation]:
    gaps = set(missing)
    return [HEADER_RULES[h] for h in HeaderName if h in gaps]


# ---------- Domain reputation ----------
def _reputation_rules(reputation: str) -> List[Recommendation]:
    if reputation == "Warning":
        return [_rec(
            "critical", "Domain Reputation", "Address Domain Reputation Issues",
            "Your domain has been flagged with reputation concerns or uses suspicious patterns that security "
            "tools may block.",
            "Check if your domain is on any blacklists using tools like MXToolbox. Review your DNS configuration, "
            "scan for malware, and ensure your domain isn't being used for spam or malicious purposes.",
            "Maintains trust with users and prevents your website from being blocked by security tools, "
            "firewalls, and email filters.",
        )]
    if reputation == "Unknown":
        return [_rec(
            "medium", "Domain Reputation", "Verify Domain Reputation",
            "Your domain's reputation status is unknown, which may affect trust and deliverability.",
            "Use reputation checking tools to verify your domain isn't listed on any blacklists. Monitor your "
            "domain regularly using services like Google Safe Browsing and VirusTotal.",
            "Ensures your domain maintains a clean reputation and isn't inadvertently blocked by security services.",
        )]
    return []


# ---------- Overall score ----------
def _overall_rule(score: int) -> Recommendation:
    if score < 40:
        return _rec(
            "critical", "Overall Security", "Urgent Security Overhaul Required",
            "Your website has critical security deficiencies that pose immediate risk to your business and users.",
            "Prioritize implementing HTTPS, all security headers, and conducting a comprehensive security audit. "
            "Consider hiring a security professional to address these urgent issues.",
            "Protects your business from data breaches, maintains customer trust, and ensures compliance with "
            "security regulations.",
        )
    if score < 60:
        return _rec(
            "high", "Overall Security", "Significant Security Improvements Needed",
            "Your security posture is below industry standards and leaves you vulnerable to common attacks.",
            "Address all missing security headers as a priority. Upgrade your SSL/TLS configuration and "
            "implement a security monitoring solution.",
            "Brings your security up to acceptable standards and significantly reduces your attack surface.",
        )
    if score < 80:
        return _rec(
            "medium", "Overall Security", "Good Security, Room for Excellence",
            "Your security is solid but not excellent. A few improvements will strengthen your overall posture.",
            "Implement any remaining security headers, consider adding a Web Application Firewall (WAF), and "
            "establish regular security assessments.",
            "Achieves security excellence and aligns with best practices used by leading organizations.",
        )
    return _rec(
        "low", "Overall Security", "Maintain Your Excellent Security",
        "Your website has excellent security! Continue monitoring and maintaining your current practices.",
        "Schedule regular security assessments, stay updated on emerging threats, and maintain your security "
        "configurations. Consider security awareness training for your team.",
        "Maintains your strong security posture and ensures you stay ahead of evolving threats.",
    )


class DeterministicRecommendationStrategy:
    """Rule table over the scan signals. Always returns at least one item."""

    name = "hardcoded"

    def generate(self, context: RecommendationContext) -> List[Recommendation]:
        recs = (
            _ssl_rules(context.ssl_grade)
            + _header_rules(context.missing_headers)
            + _reputation_rules(context.reputation)
            + [_overall_rule(context.score)]
        )
        return by_priority(recs)
