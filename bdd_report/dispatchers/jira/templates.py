"""Comment templates posted to Jira tickets."""

SUCCESS_TEMPLATE = """\
✅ Test Execution Successful

📊 Test Summary:

Environment: {{ environment }}
Browser: {{ browser }}
Execution Time: {{ duration }}
Status: PASSED
Scenarios: {{ passed_scenarios }}/{{ total_scenarios }} passed
{% if is_fallback %}

⚠️ Fallback Report: the primary test report was unavailable, results were \
synthesized from pipeline status.
{% endif %}

📝 Test Details:
{{ test_details }}
{% if ci_section %}

🚀 GitLab Pipeline:
{{ ci_section }}
{% endif %}

⏰ Executed: {{ timestamp }}

--
Posted by the BDD automation framework"""

FAILURE_TEMPLATE = """\
❌ Test Execution Failed

📊 Test Summary:

Environment: {{ environment }}
Browser: {{ browser }}
Execution Time: {{ duration }}
Status: FAILED
Scenarios: {{ passed_scenarios }}/{{ total_scenarios }} passed
{% if is_fallback %}

⚠️ Fallback Report: the primary test report was unavailable, results were \
synthesized from pipeline status.
{% endif %}

❌ Failed Tests:
{{ failed_tests }}

📝 Test Details:
{{ test_details }}
{% if ci_section %}

🚀 GitLab Pipeline:
{{ ci_section }}
{% endif %}

⏰ Executed: {{ timestamp }}

--
Posted by the BDD automation framework"""

CI_SECTION_TEMPLATE = """\
Pipeline: [View Pipeline|{{ pipeline_url }}]
{% if job_url %}Job: [View Job|{{ job_url }}]
{% endif %}{% if project_url %}Project: [View Project|{{ project_url }}]
{% endif %}"""
